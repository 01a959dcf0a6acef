"""
Document extraction: one XML file to one Document plus its Nodes and Properties.

Pure computation, no store access. Only elements carrying an ``id`` attribute
become Nodes. ``parent_id`` is the id of the direct parent element when that
parent has one, otherwise None; there is no search further up the tree, so an
identified element below an anonymous wrapper has no parent in the model.

Parsing uses BeautifulSoup's "xml" builder, which recovers from malformed
markup instead of failing.
"""

import hashlib
import os
from pathlib import Path
from typing import List, Optional

from bs4 import BeautifulSoup, Tag
from bs4.builder import ParserRejectedMarkup

from xmlgraph.shared.errors import ExtractionError
from xmlgraph.shared.models import Document, ExtractionResult, Node, Property
from xmlgraph.shared.observability import get_logger

from .type_inference import infer_type

logger = get_logger(__name__)

ID_ATTRIBUTE = "id"


def document_id_for(path: str) -> str:
    """File name without its ``.xml`` extension."""
    name = os.path.basename(path)
    if name.endswith(".xml"):
        return name[: -len(".xml")]
    return name


def _compute_checksum(raw: bytes) -> str:
    return hashlib.sha256(raw).hexdigest()


def _local_name(qualified: str) -> str:
    return qualified.rsplit(":", 1)[-1]


def _is_namespace_declaration(key: str) -> bool:
    return key == "xmlns" or key.startswith("xmlns:")


def _qualified_tag(tag: Tag) -> str:
    return f"{tag.prefix}:{tag.name}" if tag.prefix else tag.name


def _position(tag: Tag) -> int:
    """Ordinal among all element siblings, identified or not."""
    # Comments, processing instructions and text are NavigableStrings.
    return sum(1 for sibling in tag.previous_siblings if isinstance(sibling, Tag))


def _xpath(tag: Tag) -> str:
    """Absolute location path; an index is added only among same-named siblings."""
    steps = []
    current = tag
    while isinstance(current, Tag) and not isinstance(current, BeautifulSoup):
        step = _qualified_tag(current)
        parent = current.parent
        if parent is not None:
            same_name = [
                child
                for child in parent.children
                if isinstance(child, Tag) and _qualified_tag(child) == step
            ]
            if len(same_name) > 1:
                index = next(i for i, c in enumerate(same_name, 1) if c is current)
                step = f"{step}[{index}]"
        steps.append(step)
        current = parent
    return "/" + "/".join(reversed(steps))


def _root_element(soup: BeautifulSoup) -> Optional[Tag]:
    for child in soup.contents:
        if isinstance(child, Tag):
            return child
    return None


class DocumentExtractor:
    """Parses one file at a time and walks its identified elements."""

    features = "xml"

    def extract(self, path: str) -> ExtractionResult:
        """
        Extract one file.

        Args:
            path: Path of the XML file

        Returns:
            ExtractionResult with nodes and properties in document order

        Raises:
            ExtractionError: If the file is unreadable or yields no root element
        """
        try:
            raw = Path(path).read_bytes()
        except OSError as e:
            raise ExtractionError(path, f"unreadable: {e}") from e

        if not raw.strip():
            raise ExtractionError(path, "empty file")

        try:
            soup = BeautifulSoup(raw, self.features)
        # lxml's XMLSyntaxError derives from SyntaxError
        except (ParserRejectedMarkup, SyntaxError) as e:
            raise ExtractionError(path, f"unparseable: {e}") from e

        root = _root_element(soup)
        if root is None:
            raise ExtractionError(path, "no root element could be recovered")

        document_id = document_id_for(path)
        document = Document(
            id=document_id,
            filename=str(path),
            file_size=len(raw),
            file_hash=_compute_checksum(raw),
        )

        identified = root.find_all(attrs={ID_ATTRIBUTE: True})
        if root.has_attr(ID_ATTRIBUTE):
            identified.insert(0, root)

        nodes: List[Node] = []
        properties: List[Property] = []
        for tag in identified:
            node = self._extract_node(tag, document_id)
            nodes.append(node)
            properties.extend(self._extract_properties(tag, node.id))

        logger.debug(
            "document_parsed",
            path=str(path),
            root=_qualified_tag(root),
            identified_elements=len(nodes),
        )

        return ExtractionResult(
            document=document,
            nodes=nodes,
            properties=properties,
            source_file=str(path),
        )

    def _extract_node(self, tag: Tag, document_id: str) -> Node:
        parent = tag.parent
        parent_id: Optional[str] = None
        if parent is not None and not isinstance(parent, BeautifulSoup):
            parent_id = parent.get(ID_ATTRIBUTE)

        return Node(
            id=tag.get(ID_ATTRIBUTE),
            node_type=tag.name,
            document_id=document_id,
            parent_id=parent_id,
            position=_position(tag),
            content=tag.get_text().strip(),
            xpath=_xpath(tag),
        )

    def _extract_properties(self, tag: Tag, node_id: str) -> List[Property]:
        properties = []
        for key, value in tag.attrs.items():
            if _is_namespace_declaration(key):
                continue
            name = _local_name(key)
            if name == ID_ATTRIBUTE:
                continue
            properties.append(
                Property(
                    node_id=node_id,
                    property_name=name,
                    property_value=value,
                    data_type=infer_type(value),
                )
            )
        return properties


def extract_document(path: str) -> ExtractionResult:
    """Convenience wrapper around a fresh DocumentExtractor."""
    return DocumentExtractor().extract(path)
