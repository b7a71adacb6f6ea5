"""Target scraping strategies.

``BaseTargetScraper`` fixes the per-target pipeline
(navigate, activate, settle, extract, build record) and leaves the
site-specific parts to subclasses: how an identifier becomes a URL, which
element triggers the state change, and which fields are read afterwards.

``ArtistScraper`` is the strategy for artist profile pages. Its locator
chains and defaults all come from ``GlobalConfig`` so that selector drift
can be patched through the environment.
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, Sequence, TypeVar

from pydantic import BaseModel

from config.settings import GlobalConfig, get_config
from artistpulse.browser import SessionDriver
from artistpulse.exceptions import LocatorNotFoundError
from artistpulse.extractor import FieldExtractor, FieldGroup, FieldSpec
from artistpulse.locators import LocatorChain, activate_with_retry
from artistpulse.logger import get_logger
from artistpulse.models import ArtistProfile, CityListeners
from artistpulse.parsers import parse_attribute, parse_count, parse_text, strip_prefix

log = get_logger(__name__)

T = TypeVar("T", bound=BaseModel)


class BaseTargetScraper(ABC, Generic[T]):
    """Per-target pipeline shared by every site strategy.

    Attributes:
        config: GlobalConfig instance for timings and retry policy.
        extractor: FieldExtractor used for the settled document.

    Type Parameters:
        T: Pydantic model produced for one target.
    """

    def __init__(
        self,
        config: GlobalConfig | None = None,
        extractor: FieldExtractor | None = None,
    ) -> None:
        self.config = config or get_config()
        self.extractor = extractor or FieldExtractor()

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable strategy name for logs."""
        ...

    @abstractmethod
    def target_url(self, target_id: str) -> str:
        """Build the page URL for one identifier."""
        ...

    @property
    @abstractmethod
    def activation_chain(self) -> LocatorChain:
        """Element clicked to reveal the data to extract."""
        ...

    @property
    @abstractmethod
    def field_specs(self) -> Sequence[FieldSpec]:
        ...

    @property
    def field_groups(self) -> Sequence[FieldGroup]:
        return ()

    @abstractmethod
    def build_record(self, raw: dict[str, Any]) -> T:
        """Turn the extractor's mapping into the typed record."""
        ...

    async def scrape(
        self,
        session: SessionDriver,
        target_id: str,
        enable_pause: bool = False,
    ) -> T:
        """Run navigate, activate, settle and extract for one target.

        Raises:
            NavigationError: If the page cannot be loaded.
            LocatorNotFoundError: If the activation chain never succeeds.
        """
        url = self.target_url(target_id)
        await session.navigate(url)

        if enable_pause:
            log.info(
                "Diagnostic pause after navigation",
                target_id=target_id,
                pause_ms=self.config.inspection_pause_ms,
            )
            await session.pause(self.config.inspection_pause_ms)

        chain = self.activation_chain
        activated = await activate_with_retry(
            chain,
            session,
            max_attempts=self.config.activation_max_attempts,
            retry_delay_ms=self.config.activation_retry_delay_ms,
        )
        if activated is None:
            raise LocatorNotFoundError(chain_name=chain.name, tried=len(chain))

        await session.pause(self.config.post_activation_settle_ms)

        raw = await self.extractor.extract(self.field_specs, session, self.field_groups)
        return self.build_record(raw)


class ArtistScraper(BaseTargetScraper[ArtistProfile]):
    """Strategy for artist pages and their audience insights dialog.

    Example:
        async with SessionDriver.create(config) as session:
            profile = await ArtistScraper(config).scrape(session, "0htlZDCG9I8LSENteF1TyQ")
    """

    def __init__(
        self,
        config: GlobalConfig | None = None,
        extractor: FieldExtractor | None = None,
    ) -> None:
        super().__init__(config, extractor)
        cfg = self.config
        self._activation_chain = LocatorChain.of("audience_insights_button", cfg.activation_locators)
        self._field_specs = (
            FieldSpec(
                name="artist_name",
                chain=LocatorChain.of("artist_name", cfg.artist_name_locators),
                parser=strip_prefix("Posted By "),
                default=cfg.default_artist_name,
            ),
            FieldSpec(
                name="image_src",
                chain=LocatorChain.of("image_src", cfg.image_locators),
                parser=parse_attribute,
                default=cfg.default_image_src,
                attribute="src",
            ),
            FieldSpec(
                name="username",
                chain=LocatorChain.of("username", cfg.username_locators),
                parser=parse_text,
                default=cfg.default_username,
            ),
            FieldSpec(
                name="followers",
                chain=LocatorChain.of("followers", cfg.followers_locators),
                parser=parse_count,
                default=cfg.default_count,
            ),
            FieldSpec(
                name="monthly_listeners",
                chain=LocatorChain.of("monthly_listeners", cfg.monthly_listeners_locators),
                parser=parse_count,
                default=cfg.default_count,
            ),
            FieldSpec(
                name="social_link",
                chain=LocatorChain.of("social_link", cfg.social_link_locators),
                parser=parse_attribute,
                default=cfg.default_social_link,
                attribute="href",
            ),
        )
        self._field_groups = (
            FieldGroup(
                name="cities",
                size=cfg.city_count,
                start_index=cfg.city_start_index,
                label=FieldSpec(
                    name="city_label",
                    chain=LocatorChain.of("city_label", cfg.city_label_locators),
                    parser=parse_text,
                    default=cfg.default_city_label,
                ),
                count=FieldSpec(
                    name="city_count",
                    chain=LocatorChain.of("city_count", cfg.city_count_locators),
                    parser=parse_count,
                    default=cfg.default_count,
                ),
            ),
        )

    @property
    def name(self) -> str:
        return "ArtistScraper"

    def target_url(self, target_id: str) -> str:
        return f"{self.config.target_base_url}{target_id}"

    @property
    def activation_chain(self) -> LocatorChain:
        return self._activation_chain

    @property
    def field_specs(self) -> Sequence[FieldSpec]:
        return self._field_specs

    @property
    def field_groups(self) -> Sequence[FieldGroup]:
        return self._field_groups

    def build_record(self, raw: dict[str, Any]) -> ArtistProfile:
        return ArtistProfile(
            artist_name=raw["artist_name"],
            image_src=raw["image_src"],
            username=raw["username"],
            followers=raw["followers"],
            monthly_listeners=raw["monthly_listeners"],
            cities=tuple(CityListeners(**entry) for entry in raw["cities"]),
            social_link=raw["social_link"],
        )
