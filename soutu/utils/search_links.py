"""
Helpers for building reverse image search replies.

Picks the image out of a Telegram message and turns a public image URL into
links for the supported search engines.
"""

from typing import Any, Dict, List, Optional
from urllib.parse import quote

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, Message

from soutu.utils.schemas import ImageInfo, SearchLinks


def get_message_image_info(message: Optional[Message]) -> Optional[ImageInfo]:
    """Return the largest photo, or an image document, attached to *message*."""
    if message is None:
        return None

    if message.photo:
        largest = message.photo[-1]
        if not largest.file_id:
            return None
        return ImageInfo(file_id=largest.file_id, file_unique_id=largest.file_unique_id or "")

    document = message.document
    if document and document.mime_type and document.mime_type.startswith("image/"):
        if not document.file_id:
            return None
        return ImageInfo(file_id=document.file_id, file_unique_id=document.file_unique_id or "")

    return None


def resolve_image_from_message(message: Optional[Message]) -> Optional[ImageInfo]:
    """Image on the message itself, else on the message it replies to."""
    image = get_message_image_info(message)
    if image is not None or message is None:
        return image
    return get_message_image_info(message.reply_to_message)


def build_image_search_links(image_url: str) -> SearchLinks:
    encoded = quote(image_url, safe="")
    return SearchLinks(
        image_url=image_url,
        google=f"https://lens.google.com/uploadbyurl?url={encoded}",
        yandex=f"https://yandex.ru/images/search?rpt=imageview&url={encoded}",
    )


def build_search_keyboard(
    links: SearchLinks, buttons: List[Dict[str, Any]]
) -> Optional[InlineKeyboardMarkup]:
    """One URL button per configured engine, one per row. Unknown engines are skipped."""
    rows = []
    for button in buttons:
        url = links.for_engine(str(button.get("engine", "")))
        if not url:
            continue
        rows.append([InlineKeyboardButton(text=str(button.get("text") or "Search"), url=url)])
    if not rows:
        return None
    return InlineKeyboardMarkup(rows)
