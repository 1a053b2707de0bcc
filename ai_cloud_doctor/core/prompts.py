"""
Prompt construction.

Builds the system prompt that embeds collected data and pins the model to
the four-section table format the response formatter understands.
"""

from ai_cloud_doctor.config.analyzers import AnalyzerDefinition

WORD_LIMIT = 400


def build_table_instructions(definition: AnalyzerDefinition) -> str:
    """The markdown table layout the model must answer in."""
    rows = []
    for section in definition.sections:
        placeholder = section.placeholder
        rows.append(
            f"| {section.heading} | • {placeholder} 1 ({definition.entity}: description) "
            f"<br> • {placeholder} 2 ({definition.entity}: description) |"
        )
    return "\n".join([
        "Return your response formatted ONLY in this exact structure for CLI display.",
        "Follow this markdown layout strictly:",
        "",
        "| Section | Details |",
        "|---------|---------|",
        *rows,
        "",
        "Rules:",
        "- Use ONLY the table above.",
        "- Replace the placeholder bullet points with specific findings.",
        "- Do not add extra text outside the table.",
        f"- Keep total word count under {WORD_LIMIT} words.",
    ])


def build_system_prompt(definition: AnalyzerDefinition, data: str) -> str:
    """System prompt carrying the collected data and the output format."""
    return (
        f"Analyze this {definition.subject} data and provide insights:\n\n"
        f"{data}\n\n"
        f"{build_table_instructions(definition)}"
    )


def build_user_prompt(definition: AnalyzerDefinition, question=None) -> str:
    return question or definition.default_question
