"""Field extraction over a settled document.

Every field is described by one ``FieldSpec``: a locator chain, a parser
and a default. ``FieldExtractor.extract`` evaluates all of them uniformly
and is total: a field that cannot be located, read or parsed takes its
default and the remaining fields are unaffected.

Grouped fields (e.g. "top N cities") are expressed as a ``FieldGroup`` of
two co-indexed specs whose locators contain an ``{index}`` placeholder.
A group always yields exactly ``size`` entries regardless of how many rows
the page actually rendered.
"""

from typing import Any, Callable, Sequence

from playwright.async_api import Error as PlaywrightError
from pydantic import BaseModel, ConfigDict, Field

from artistpulse.exceptions import FieldParseDefault
from artistpulse.locators import DocumentContext, LocatorChain, resolve
from artistpulse.logger import get_logger

log = get_logger(__name__)


class FieldSpec(BaseModel):
    """A named extraction unit.

    Attributes:
        name: Key of the value in the extracted record.
        chain: Fallback locators for the node holding the value.
        parser: Pure function from raw text to the typed value.
        default: Value used when the node is missing or unparseable.
        attribute: Attribute to read instead of the text content.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    chain: LocatorChain
    parser: Callable[[str], Any]
    default: Any
    attribute: str | None = None

    def for_index(self, index: int) -> "FieldSpec":
        return self.model_copy(
            update={"name": f"{self.name}[{index}]", "chain": self.chain.for_index(index)}
        )


class FieldGroup(BaseModel):
    """Fixed-size list of (label, count) entries built from indexed rows."""

    model_config = ConfigDict(frozen=True)

    name: str
    size: int = Field(ge=1)
    start_index: int = Field(default=1, ge=0)
    label: FieldSpec
    count: FieldSpec

    @property
    def indices(self) -> range:
        return range(self.start_index, self.start_index + self.size)


class FieldExtractor:
    """Evaluates field specs against a document context.

    Attributes:
        defaulted: Names of fields that fell back to their default during
            the most recent ``extract`` call.
    """

    def __init__(self) -> None:
        self.defaulted: list[str] = []

    async def extract(
        self,
        specs: Sequence[FieldSpec],
        document: DocumentContext,
        groups: Sequence[FieldGroup] = (),
    ) -> dict[str, Any]:
        """Extract every field and group into a plain mapping.

        Never raises. Each spec contributes exactly one key and each group
        one list of ``{"label", "count"}`` dicts of length ``group.size``.
        """
        self.defaulted = []
        record: dict[str, Any] = {}

        for spec in specs:
            record[spec.name] = await self._extract_field(spec, document)

        for group in groups:
            entries = []
            for index in group.indices:
                label = await self._extract_field(group.label.for_index(index), document)
                count = await self._extract_field(group.count.for_index(index), document)
                entries.append({"label": label, "count": count})
            record[group.name] = entries

        if self.defaulted:
            log.info(
                "Extraction finished with defaults",
                defaulted=len(self.defaulted),
                fields=self.defaulted,
            )
        return record

    async def _extract_field(self, spec: FieldSpec, document: DocumentContext) -> Any:
        try:
            return await self._read_field(spec, document)
        except FieldParseDefault as exc:
            log.warning("Field defaulted", field=spec.name, reason=exc.reason)
        except Exception as exc:
            log.warning(
                "Field extraction raised, using default",
                field=spec.name,
                error_type=type(exc).__name__,
                error=str(exc),
            )
        self.defaulted.append(spec.name)
        return spec.default

    async def _read_field(self, spec: FieldSpec, document: DocumentContext) -> Any:
        handle = await resolve(spec.chain, document)
        if handle is None:
            raise FieldParseDefault(spec.name, f"none of {len(spec.chain)} locator(s) matched")

        try:
            raw = await document.read(handle, spec.attribute)
        except PlaywrightError as exc:
            raise FieldParseDefault(spec.name, f"read failed: {exc}") from exc

        if raw is None:
            source = f"attribute '{spec.attribute}'" if spec.attribute else "text content"
            raise FieldParseDefault(spec.name, f"{source} is missing")

        try:
            return spec.parser(raw)
        except Exception as exc:
            raise FieldParseDefault(spec.name, f"parser rejected {raw[:50]!r}: {exc}") from exc
