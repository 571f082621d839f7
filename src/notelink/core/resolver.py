"""Link Resolver: map a location to the notes it can mean."""

import logging

from .context import Chooser
from .errors import AmbiguousLinkError, ConfigError
from .model import DisambiguationPolicy, Location, Note
from .ports import CorpusIndex

logger = logging.getLogger(__name__)


def resolve(
    location: Location, index: CorpusIndex, from_: Location | None = None
) -> list[Note]:
    """
    All notes ``location`` can refer to.

    A location without fname but with an anchor (``[[#intro]]``) refers to
    the note it was written in. Matching is exact and case-sensitive; a
    vault name restricts the search to that vault. Several candidates are
    returned as they are, this function never picks one.
    """
    if not location.fname:
        if from_ is None or location.anchor is None:
            return []
        location = Location(fname=from_.fname, vault_name=from_.vault_name)
    return list(index.lookup(location.fname, location.vault_name))


def choose(
    location: Location,
    candidates: list[Note],
    from_: Location | None = None,
    policy: DisambiguationPolicy = DisambiguationPolicy.SAME_VAULT,
    chooser: Chooser | None = None,
) -> Note | None:
    """Apply the disambiguation policy to several candidates."""
    if not candidates:
        return None
    if len(candidates) == 1:
        return candidates[0]

    logger.debug(
        "%s matches %d notes, applying %s",
        location.fname,
        len(candidates),
        policy.value,
    )
    if policy is DisambiguationPolicy.FIRST_MATCH:
        return candidates[0]
    if policy is DisambiguationPolicy.SAME_VAULT:
        if from_ is not None:
            for note in candidates:
                if note.vault_name == from_.vault_name:
                    return note
        return candidates[0]
    if policy is DisambiguationPolicy.PROMPT:
        if chooser is None:
            raise ConfigError("Disambiguation policy 'prompt' needs a chooser")
        return chooser(location, candidates)
    raise AmbiguousLinkError(location.fname, candidates)


def resolve_one(
    location: Location,
    index: CorpusIndex,
    from_: Location | None = None,
    policy: DisambiguationPolicy = DisambiguationPolicy.SAME_VAULT,
    chooser: Chooser | None = None,
) -> Note | None:
    """
    Resolve to a single note, or None when nothing matches.

    Raises:
        AmbiguousLinkError: several matches under ``DisambiguationPolicy.ERROR``
    """
    return choose(location, resolve(location, index, from_), from_, policy, chooser)
