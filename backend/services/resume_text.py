"""Plain-text rendering of a structured resume.

The output is what gets sent to the AI provider and stored as the
resume's ``extracted_text``.
"""

from models.schemas.resume_data import ResumeData

RULE = "-" * 40


def _join(parts: list[str], sep: str) -> str:
    return sep.join(p for p in parts if p)


def resume_to_plain_text(data: ResumeData) -> str:
    lines: list[str] = []
    info = data.personal_info

    if info.full_name:
        lines.append(info.full_name)

    contact = _join([info.phone, info.email, info.linkedin, info.github, info.website], " | ")
    if contact:
        lines.append(contact)

    lines.append("")

    if data.education:
        lines += ["EDUCATION", RULE]
        for edu in data.education:
            lines.append(f"{edu.school}{f', {edu.location}' if edu.location else ''}")
            degree_line = _join([edu.degree, edu.field], " in ")
            date_line = _join([edu.start_date, edu.end_date], " – ")
            if degree_line or date_line:
                lines.append(f"{degree_line}{f' | {date_line}' if date_line else ''}")
            lines.append("")

    if data.experience:
        lines += ["EXPERIENCE", RULE]
        for exp in data.experience:
            date_line = _join([exp.start_date, exp.end_date], " – ")
            lines.append(f"{exp.title}{f' | {date_line}' if date_line else ''}")
            lines.append(f"{exp.company}{f', {exp.location}' if exp.location else ''}")
            lines += [f"• {b}" for b in exp.bullets if b.strip()]
            lines.append("")

    if data.projects:
        lines += ["PROJECTS", RULE]
        for proj in data.projects:
            date_line = _join([proj.start_date, proj.end_date], " – ")
            header = _join([proj.name, proj.technologies, date_line], " | ")
            lines.append(header)
            lines += [f"• {b}" for b in proj.bullets if b.strip()]
            lines.append("")

    skills = data.skills
    if skills.languages or skills.frameworks or skills.tools or skills.other:
        lines += ["TECHNICAL SKILLS", RULE]
        if skills.languages:
            lines.append(f"Languages: {skills.languages}")
        if skills.frameworks:
            lines.append(f"Frameworks: {skills.frameworks}")
        if skills.tools:
            lines.append(f"Developer Tools: {skills.tools}")
        if skills.other:
            lines.append(f"Other: {skills.other}")

    return "\n".join(lines)
