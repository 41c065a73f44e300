"""Extractor registry keyed by source identity."""

from __future__ import annotations

from typing import Iterable

from ..config import SourceConfig
from ..engine.fetcher import Fetcher
from ..models import SourceIdentity
from .base import CardExtractor, SourceExtractor, slugify
from .cutshort import CutshortExtractor
from .freshersworld import FreshersworldExtractor
from .glassdoor import GlassdoorExtractor
from .hirist import HiristExtractor
from .indeed import IndeedExtractor
from .internshala import InternshalaExtractor
from .jobsora import JobsoraExtractor
from .linkedin import LinkedInExtractor
from .naukri import NaukriExtractor
from .shine import ShineExtractor
from .wellfound import WellfoundExtractor

EXTRACTORS: dict[SourceIdentity, type[CardExtractor]] = {
    SourceIdentity.INDEED: IndeedExtractor,
    SourceIdentity.LINKEDIN: LinkedInExtractor,
    SourceIdentity.NAUKRI: NaukriExtractor,
    SourceIdentity.GLASSDOOR: GlassdoorExtractor,
    SourceIdentity.INTERNSHALA: InternshalaExtractor,
    SourceIdentity.SHINE: ShineExtractor,
    SourceIdentity.WELLFOUND: WellfoundExtractor,
    SourceIdentity.CUTSHORT: CutshortExtractor,
    SourceIdentity.HIRIST: HiristExtractor,
    SourceIdentity.FRESHERSWORLD: FreshersworldExtractor,
    SourceIdentity.JOBSORA: JobsoraExtractor,
}


def create_extractor(config: SourceConfig, fetcher: Fetcher, **kwargs) -> CardExtractor:
    return EXTRACTORS[config.identity](config, fetcher, **kwargs)


def build_extractors(configs: Iterable[SourceConfig], fetcher: Fetcher) -> list[CardExtractor]:
    """Instantiate one extractor per config, in the fixed identity order."""

    order = list(SourceIdentity)
    ordered = sorted(configs, key=lambda config: order.index(config.identity))
    return [create_extractor(config, fetcher) for config in ordered]


__all__ = [
    "CardExtractor",
    "EXTRACTORS",
    "SourceExtractor",
    "build_extractors",
    "create_extractor",
    "slugify",
]
