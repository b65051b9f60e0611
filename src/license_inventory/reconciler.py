"""Reconcile one dependency into one package record.

Known identifiers from structured metadata are trusted verbatim. Raw license
texts are normalized and matched, and every accepted candidate joins the
package's license set. Texts that cannot be classified mark the package as
unresolved so a human can review them.
"""

import logging

from license_inventory.errors import EmptyInputError, MalformedDependencyError
from license_inventory.matcher import LicenseMatcher
from license_inventory.models import Dependency, LicenseIdentifier, LicenseText, Package
from license_inventory.normalizer import TextNormalizer

logger = logging.getLogger(__name__)


def _label(dependency: Dependency, index: int, text: LicenseText) -> str:
    return text.label or f"{dependency.name}#{index}"


class DependencyReconciler:
    """Turn a Dependency into exactly one Package.

    Attributes:
        normalizer: Normalizer applied to raw texts.
        matcher: Matcher scoring normalized texts against the corpus.
    """

    def __init__(self, normalizer: TextNormalizer, matcher: LicenseMatcher) -> None:
        self.normalizer = normalizer
        self.matcher = matcher

    def reconcile(self, dependency: Dependency) -> Package:
        """Build the package record for a dependency.

        Args:
            dependency: Dependency supplied by a collaborator.

        Returns:
            Package with the union of known and matched licenses.

        Raises:
            MalformedDependencyError: If the dependency has neither known
                identifiers nor raw texts.
        """
        if not dependency.known_identifiers and not dependency.raw_texts:
            raise MalformedDependencyError(dependency)

        licenses: set[LicenseIdentifier] = set(dependency.known_identifiers)
        unresolved_texts: list[str] = []

        for index, text in enumerate(dependency.raw_texts):
            label = _label(dependency, index, text)
            matched = self._classify(dependency, text, label)
            if matched:
                licenses.update(matched)
            else:
                unresolved_texts.append(label)

        return Package(
            name=dependency.name,
            version=dependency.version,
            licenses=tuple(licenses),
            unresolved=bool(unresolved_texts),
            unresolved_texts=tuple(unresolved_texts),
            url=dependency.url,
        )

    def _classify(
        self, dependency: Dependency, text: LicenseText, label: str
    ) -> list[LicenseIdentifier]:
        try:
            normalized = self.normalizer.normalize(
                text.text, source_type=text.source_type, label=label
            )
        except EmptyInputError:
            logger.warning(
                "Empty license text %s for '%s %s'",
                label,
                dependency.name,
                dependency.version,
            )
            return []

        accepted = self.matcher.match(normalized)
        if not accepted:
            best = self.matcher.best(normalized)
            if best is not None:
                logger.warning(
                    "Low confidence of %.3f (%s) on license detection of %s for '%s %s'",
                    best.confidence,
                    best.identifier,
                    label,
                    dependency.name,
                    dependency.version,
                )
            else:
                logger.warning(
                    "No recognizable license in %s for '%s %s'",
                    label,
                    dependency.name,
                    dependency.version,
                )
            return []

        if len(accepted) > 1:
            logger.debug(
                "Multiple licenses detected in %s for '%s %s': %s",
                label,
                dependency.name,
                dependency.version,
                ", ".join(f"{c.identifier} ({c.confidence:.3f})" for c in accepted),
            )
        return [c.identifier for c in accepted]
