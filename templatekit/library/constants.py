"""Built-in snippets offered by the elements library."""

from __future__ import annotations

ELEMENT_CATEGORIES: tuple[str, ...] = ("text", "content", "layout")

ELEMENTS: dict[str, dict[str, str]] = {
    "text": {
        "Heading": '<h2 style="color: #1f2937; margin: 0 0 15px 0; font-size: 22px; font-weight: bold;">Your Heading Here</h2>',
        "Paragraph": '<p style="color: #6b7280; margin: 0 0 15px 0; font-size: 16px; line-height: 1.6;">Your paragraph text goes here.</p>',
        "Bold Text": '<strong style="color: #1f2937; font-weight: bold;">Bold text here</strong>',
        "Link": '<a href="#" style="color: #3b82f6; text-decoration: underline;">Click here</a>',
    },
    "content": {
        "Button": '<div style="text-align: center; margin: 25px 0;"><a href="#" style="background-color: #3b82f6; color: #ffffff; text-decoration: none; padding: 12px 25px; border-radius: 6px; font-weight: bold; display: inline-block;">Click Here</a></div>',
        "Image": '<div style="text-align: center; margin: 20px 0;"><img src="https://via.placeholder.com/400x200" alt="Description" style="max-width: 100%; height: auto; border-radius: 8px;"></div>',
        "Divider": '<hr style="border: none; border-top: 1px solid #e5e7eb; margin: 20px 0;">',
    },
    "layout": {
        "Two Columns": '<div style="display: flex; gap: 20px;"><div style="flex: 1;"><p>Left column content</p></div><div style="flex: 1;"><p>Right column content</p></div></div>',
        "Spacing": '<div style="height: 20px;"></div>',
    },
}


__all__ = ["ELEMENTS", "ELEMENT_CATEGORIES"]
