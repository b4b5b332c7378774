"""Document Parser - JSON to Definition with validation."""

from typing import Any

from pydantic import ValidationError
from returns.result import Failure

from ..core import get_logger, get_settings
from ..core.errors import DocumentParseError
from ..core.json import JSONParseError, loads_json
from ..core.validate import check_document_depth, check_document_size
from .action import ACTION_RESOLVERS_CONTEXT_KEY, SupportsActionValidation
from .definition import Definition

logger = get_logger(__name__)


def format_location(loc: tuple[Any, ...]) -> str:
    """
    Render a pydantic error location as a document path.

    Node discriminator tags and union branch labels are dropped so the path
    reads like the JSON: ("root", "children", 0, "component", "actions",
    "onTap", "Action") becomes "root.children[0].actions.onTap".
    """
    path = ""
    for i, part in enumerate(loc):
        if isinstance(part, int):
            path += f"[{part}]"
            continue
        if part in _NODE_TAGS and _follows_node_slot(loc, i):
            continue
        if part in _BRANCH_LABELS or part.startswith("function-"):
            continue
        path += f".{part}" if path else str(part)
    return path


_NODE_TAGS = {"layout", "sectionLayout", "forEach", "spacer", "component"}
_NODE_LISTS = {"children"}
_NODE_FIELDS = {"template", "emptyView", "header", "footer", "itemTemplate"}
_BRANCH_LABELS = {"str", "Action", "int", "float", "ColumnConfig", "Fractional", "reference", "inline"}


def _follows_node_slot(loc: tuple[Any, ...], i: int) -> bool:
    prev = loc[i - 1] if i >= 1 else None
    if isinstance(prev, int):
        return i >= 2 and loc[i - 2] in _NODE_LISTS
    return prev in _NODE_FIELDS


class DocumentParser:
    """Parses JSON documents into Definition models.

    Parsing is whole-document and fail-fast: the first structural or type
    error anywhere aborts the parse.
    """

    def __init__(
        self,
        resolvers: SupportsActionValidation | None = None,
        max_size: int | None = None,
        max_depth: int | None = None,
    ) -> None:
        """
        Args:
            resolvers: Registry used to validate action parameters at parse time
            max_size: Maximum document size in bytes (default from settings)
            max_depth: Maximum JSON nesting depth (default from settings)
        """
        settings = get_settings()
        self.resolvers = resolvers
        self.max_size = max_size or settings.max_document_size
        self.max_depth = max_depth or settings.max_document_depth

    def parse(self, data: bytes | str) -> Definition:
        """
        Parse a JSON document.

        Args:
            data: UTF-8 bytes or already-decoded text

        Returns:
            Validated Definition

        Raises:
            DocumentParseError: invalidEncoding or decodingError
        """
        payload = self._decode_text(data)

        size_check = check_document_size(payload, self.max_size)
        if isinstance(size_check, Failure):
            failure = size_check.failure()
            logger.error("document_too_large", size=failure.value, max_size=self.max_size)
            raise DocumentParseError.decoding_error(failure.message)

        try:
            raw = loads_json(payload)
        except JSONParseError as e:
            logger.error("json_parse_failed", error=str(e))
            raise DocumentParseError.decoding_error(str(e), e.original) from e

        return self.parse_object(raw)

    def parse_object(self, raw: Any) -> Definition:
        """Validate already-decoded JSON data into a Definition."""
        if not isinstance(raw, dict):
            logger.error("invalid_format", type=type(raw).__name__)
            raise DocumentParseError.decoding_error(
                f"Expected a JSON object at top level, got {type(raw).__name__}"
            )

        depth_check = check_document_depth(raw, self.max_depth)
        if isinstance(depth_check, Failure):
            failure = depth_check.failure()
            logger.error("document_too_deep", depth=failure.value, max_depth=self.max_depth)
            raise DocumentParseError.decoding_error(failure.message)

        context = {ACTION_RESOLVERS_CONTEXT_KEY: self.resolvers} if self.resolvers is not None else None
        try:
            definition = Definition.model_validate(raw, context=context)
        except ValidationError as e:
            first = e.errors()[0]
            path = format_location(first["loc"])
            logger.error(
                "document_invalid",
                path=path,
                error=first["msg"],
                error_count=e.error_count(),
            )
            raise DocumentParseError.decoding_error(first["msg"], e, path) from e

        if not definition.is_compatible():
            logger.warning(
                "document_version_mismatch",
                document=definition.id,
                version=definition.version,
            )

        logger.info(
            "document_parsed",
            document=definition.id,
            styles=len(definition.styles),
            actions=len(definition.actions),
        )
        return definition

    @staticmethod
    def _decode_text(data: bytes | str) -> bytes:
        if isinstance(data, str):
            try:
                return data.encode("utf-8")
            except UnicodeEncodeError as e:
                logger.error("invalid_encoding", position=e.start)
                raise DocumentParseError.invalid_encoding(
                    f"Document text is not encodable as UTF-8 (character {e.start})", e
                ) from e
        try:
            data.decode("utf-8")
        except UnicodeDecodeError as e:
            logger.error("invalid_encoding", position=e.start)
            raise DocumentParseError.invalid_encoding(
                f"Document is not valid UTF-8 (byte {e.start})", e
            ) from e
        return bytes(data)


def parse_document(
    data: bytes | str,
    resolvers: SupportsActionValidation | None = None,
) -> Definition:
    """Parse a document with default limits."""
    return DocumentParser(resolvers=resolvers).parse(data)
