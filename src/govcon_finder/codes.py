"""Resolution of the NAICS classification codes queried in one run."""

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

logger = logging.getLogger(__name__)

WILDCARD = "*"
MIN_CODE_LENGTH = 4
PREFIX_LENGTH = 4

# Used when no contractor codes are on file or the lookup fails
FALLBACK_CODES: list[str] = [
    "541511", "541512", "541513", "541519", "518210",  # IT
    "541611", "541612", "541613", "541618", "541990",  # Consulting
    "541330", "541420", "541715",  # Engineering
    "561210", "561110", "561320", "561499",  # Support
    "236220", "238210", "238220",  # Construction
    "611430", "611699",  # Training
]

CodeStrategy = Callable[[], list[str]]


@dataclass(frozen=True)
class ResolvedCodes:
    """Codes for one run. wildcard=True means query without a code filter."""

    codes: list[str]
    wildcard: bool = False

    @property
    def code_list(self) -> str:
        return ",".join(self.codes)


def sanitize_codes(codes: Iterable[object]) -> list[str]:
    """Distinct, trimmed codes of at least MIN_CODE_LENGTH chars, first-seen order."""
    seen: set[str] = set()
    out: list[str] = []
    for code in codes:
        text = str(code or "").strip()
        if len(text) < MIN_CODE_LENGTH or text in seen:
            continue
        seen.add(text)
        out.append(text)
    return out


def first_usable(strategies: Sequence[tuple[str, CodeStrategy]]) -> list[str]:
    """
    Try each named strategy in order; the first one that returns real
    codes wins. A strategy that raises or returns nothing usable (the
    wildcard marker is shorter than MIN_CODE_LENGTH) counts as empty.
    """
    for name, strategy in strategies:
        try:
            codes = sanitize_codes(strategy())
        except Exception as e:
            logger.warning("Code source %s failed: %s", name, e)
            continue
        if not codes:
            logger.info("Code source %s returned no usable codes", name)
            continue
        logger.info("Using %d NAICS codes from %s", len(codes), name)
        return codes
    return []


def fallback_strategy() -> list[str]:
    return list(FALLBACK_CODES)


class ClassificationCodeResolver:
    """Chooses the codes to query: contractor codes, else the fallback list."""

    def __init__(self, contractor_codes: CodeStrategy):
        self._strategies: list[tuple[str, CodeStrategy]] = [
            ("contractors", contractor_codes),
            ("fallback", fallback_strategy),
        ]

    def known_codes(self) -> list[str]:
        """Real codes on file (or fallback). Never raises."""
        return first_usable(self._strategies)

    def resolve(self, include_all: bool = False) -> ResolvedCodes:
        if include_all:
            return ResolvedCodes(codes=[WILDCARD], wildcard=True)
        return ResolvedCodes(codes=self.known_codes())


def matches_known_code(code: str, known_codes: Iterable[str]) -> bool:
    """Exact match, or the listing code starts with a known code's 4-digit prefix."""
    if not code:
        return False
    for known in known_codes:
        if not known:
            continue
        if code == known or code.startswith(known[:PREFIX_LENGTH]):
            return True
    return False
