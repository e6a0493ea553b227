"""Prompt builders - чистые функции без I/O."""

from hairstyle_tasks.prompts.hairstyle_4o import attachment_urls, build_4o_prompt
from hairstyle_tasks.prompts.hairstyle_kontext import build_kontext_prompt

__all__ = [
    "attachment_urls",
    "build_4o_prompt",
    "build_kontext_prompt",
]
