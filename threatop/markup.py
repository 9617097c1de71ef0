"""HTML helpers for chat-log message content."""
from __future__ import annotations

import re

from bs4 import BeautifulSoup

CONTENT_SELECTOR = ".message-content"


def build_annotation_block(soup: BeautifulSoup, block_class: str, style_class: str, label: str):
    block = soup.new_tag("div", attrs={"class": f"{block_class} {style_class}"})
    span = soup.new_tag("span")
    span.string = label
    block.append(span)
    return block


def splice_annotation(content: str, block_class: str, style_class: str, label: str) -> str:
    """Append an annotation block inside the message container, or at the root if there is none."""
    soup = BeautifulSoup(content, "html.parser")
    block = build_annotation_block(soup, block_class, style_class, label)
    container = soup.select_one(CONTENT_SELECTOR)
    if container is not None:
        container.append(block)
    else:
        soup.append(block)
    return str(soup)


def find_annotations(content: str, block_class: str) -> list[tuple[str, str]]:
    """Return ``(style_class, label)`` for every annotation block in ``content``."""
    soup = BeautifulSoup(content, "html.parser")
    found: list[tuple[str, str]] = []
    for block in soup.select(f"div.{block_class}"):
        classes = [c for c in block.get("class", []) if c != block_class]
        style_class = classes[0] if classes else ""
        found.append((style_class, block.get_text(strip=True)))
    return found


def html_to_text(content: str) -> str:
    soup = BeautifulSoup(content, "html.parser")
    text = soup.get_text(separator="\n")
    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r"\n\s*\n*", "\n", text)
    return text.strip()


def build_roll_content(author_name: str, check_type: str, total: int) -> str:
    soup = BeautifulSoup("", "html.parser")
    header = soup.new_tag("header", attrs={"class": "message-header"})
    header.string = author_name
    content = soup.new_tag("div", attrs={"class": "message-content"})
    roll = soup.new_tag("div", attrs={"class": "dice-roll"})
    flavor = soup.new_tag("span", attrs={"class": "flavor-text"})
    flavor.string = check_type
    result = soup.new_tag("h4", attrs={"class": "dice-total"})
    result.string = str(total)
    roll.append(flavor)
    roll.append(result)
    content.append(roll)
    soup.append(header)
    soup.append(content)
    return str(soup)
