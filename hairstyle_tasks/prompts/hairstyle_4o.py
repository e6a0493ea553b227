"""Промпт для GPT-4o Image.

Провайдер получает изображения позиционно в порядке:
1. фото пользователя,
2. референс причёски (если есть),
3. референс цвета (если есть).
Тексты ссылаются на вложения по порядковому номеру, поэтому порядок
в `attachment_urls` и в промпте должен совпадать.
"""

KEEP_FACE = "Keep the person's face, facial features, and expression exactly the same."
NATURAL_LOOK = (
    "The new hairstyle should look natural and realistic, "
    "blending seamlessly with the original lighting and photo style."
)
STYLE_REFERENCE = (
    "Use the second image attachment as the hairstyle reference. "
    "The first image attachment is the original photo of the user."
)
COLOR_REFERENCE_THIRD = "Use the third image attachment as a color reference"
COLOR_REFERENCE_SECOND = (
    "Use the second image attachment as a hair color reference. "
    "The first image attachment is the original photo of the user."
)


def attachment_urls(
    photo_url: str,
    style_cover: str | None = None,
    color_cover: str | None = None,
) -> list[str]:
    """Список вложений в порядке, на который ссылается промпт."""
    urls = [photo_url]
    if style_cover:
        urls.append(style_cover)
    if color_cover:
        urls.append(color_cover)
    return urls


def build_4o_prompt(
    hairstyle: str,
    haircolor: str | None = None,
    haircolor_hex: str | None = None,
    with_style_reference: bool = False,
    with_color_reference: bool = False,
    detail: str | None = None,
) -> str:
    """Собрать инструкцию смены причёски для GPT-4o.

    Args:
        hairstyle: Название целевой причёски
        haircolor: Название цвета (None = сохранить текущий)
        haircolor_hex: HEX цвета, добавляется в скобках
        with_style_reference: Приложен референс причёски
        with_color_reference: Приложен референс цвета
        detail: Пожелания пользователя в свободной форме

    Returns:
        Промпт, строки разделены переводом строки

    """
    lines: list[str] = []

    if haircolor:
        suffix = f" (hex: {haircolor_hex})." if haircolor_hex else "."
        lines.append(f"Change the current hairstyle to a {hairstyle} with {haircolor} hair color{suffix}")
    else:
        lines.append(
            f"Change the current hairstyle to a {hairstyle} and keep the person hair color and skin tone."
        )

    if with_style_reference:
        lines.append(STYLE_REFERENCE)

    if with_color_reference:
        lines.append(COLOR_REFERENCE_THIRD if with_style_reference else COLOR_REFERENCE_SECOND)

    lines.extend([KEEP_FACE, NATURAL_LOOK])

    if detail:
        lines.extend(["", "Special Requests", detail])

    return "\n".join(lines)
