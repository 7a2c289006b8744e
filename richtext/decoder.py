"""Block decoder: turns the renderer's content HTML into typed blocks.

Only the fragment's direct children are inspected:

    <p>text</p>           -> TextBlock (dropped when the text is empty)
    <div>                 -> ImageGroupBlock, one image per child container;
      <div> ... <img/> </div>   the container's last child is the image
    </div>

Anything else is skipped. The fragment is parsed the way a browser parses
body content (html5lib), so unclosed and misnested tags close where the
renderer's own DOM closes them.
"""

from __future__ import annotations

import logging
import re

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PageElement

from richtext.schemas import ContentBlock, ContentDocument, ImageDescriptor, ImageGroupBlock, TextBlock

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_PREFIX = "cdn.hk01.com/image/"

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _is_text_node(node: PageElement) -> bool:
    # Comments, CDATA and doctypes are NavigableString subclasses too.
    return type(node) is NavigableString


def _parse_int(value: str) -> int | None:
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else None


def text_from_node(node: Tag) -> str:
    """Value of the last direct text child of ``node``, or ''."""
    text = ""
    for child in node.children:
        if _is_text_node(child):
            text = str(child)
    return text


def text_block_from_node(node: Tag) -> TextBlock | None:
    text = text_from_node(node)
    if not text:
        return None
    return TextBlock(htmlContent=text)


def image_from_element(element: Tag, image_prefix: str = DEFAULT_IMAGE_PREFIX) -> ImageDescriptor | None:
    """Read one image element's attributes. None if it has no ``localidentifier``."""
    attrs = element.attrs
    media_id = attrs.get("localidentifier")
    if media_id is None:
        return None

    fields: dict[str, object] = {"mediaId": media_id}
    if "index" in attrs:
        # TODO: use the upload API's returned URL once uploads report it
        fields["url"] = image_prefix + attrs["index"]
    if "mime" in attrs:
        fields["format"] = attrs["mime"].rsplit("/", 1)[-1]
    for attr, key in (("originalwidth", "width"), ("originalheight", "height")):
        if attr in attrs:
            fields[key] = _parse_int(attrs[attr])
    return ImageDescriptor(**fields)


def image_block_from_node(node: Tag, image_prefix: str = DEFAULT_IMAGE_PREFIX) -> ImageGroupBlock | None:
    images: list[ImageDescriptor] = []
    for container in node.children:
        if not isinstance(container, Tag) or not container.contents:
            continue
        element = container.contents[-1]
        if not isinstance(element, Tag):
            continue
        image = image_from_element(element, image_prefix)
        if image is not None:
            images.append(image)

    if not images:
        return None
    return ImageGroupBlock(images=images)


def decode(html: str, image_prefix: str = DEFAULT_IMAGE_PREFIX) -> list[ContentBlock]:
    """Decode an HTML fragment into blocks, in document order."""
    soup = BeautifulSoup(html or "", "html5lib")
    blocks: list[ContentBlock] = []
    if soup.body is None:
        return blocks

    for node in soup.body.children:
        if not isinstance(node, Tag):
            continue
        block: ContentBlock | None
        match node.name:
            case "p":
                block = text_block_from_node(node)
            case "div":
                block = image_block_from_node(node, image_prefix)
            case _:
                logger.debug(f"Skipping <{node.name}> node")
                block = None
        if block is not None:
            blocks.append(block)

    return blocks


def parse_html(html: str, image_prefix: str = DEFAULT_IMAGE_PREFIX) -> str:
    """Decode ``html`` and serialize it as ``{"blocks": [...]}`` JSON text."""
    document = ContentDocument(blocks=decode(html, image_prefix))
    return document.model_dump_json(exclude_none=True)
