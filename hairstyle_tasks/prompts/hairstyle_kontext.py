"""Промпт для Flux Kontext.

Kontext принимает одно входное изображение, референсы не поддерживаются.
"""

KEEP_REST = (
    "Maintain the rest of the image the same, and do not modify the background "
    "or the proportions of the character's body."
)


def build_kontext_prompt(
    hairstyle: str,
    haircolor: str | None = None,
    detail: str | None = None,
) -> str:
    """Собрать инструкцию смены причёски для Kontext."""
    if haircolor:
        lines = [f"Change the current hairstyle to a {hairstyle} with {haircolor} hair color."]
    else:
        lines = [f"Change the current hairstyle to a {hairstyle} and keep the person hair color."]

    lines.append(KEEP_REST)

    if detail:
        lines.append(f"Other ideas about how to edit my image: {detail}")

    return "\n".join(lines)
