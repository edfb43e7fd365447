"""
Fallback Diagram Catalog

Hand-authored sequence diagrams used when healing cannot produce a valid
diagram. Every entry satisfies the Diagram invariants; the entry for a
fragment is chosen by `ordinal mod catalog size`, so the same position always
receives the same placeholder.
"""

from typing import Tuple

from .schemas import Diagram, Interaction, InteractionKind, Participant


def _diagram(title: str, participants: Tuple[str, ...], steps: Tuple[Tuple[str, str, str, bool], ...]) -> Diagram:
    return Diagram(
        title=title,
        participants=[Participant(name=name) for name in participants],
        interactions=[
            Interaction(
                source=source,
                target=target,
                message=message,
                kind=InteractionKind.RESPONSE if is_response else InteractionKind.SYNCHRONOUS,
            )
            for source, target, message, is_response in steps
        ],
    )


FALLBACK_CATALOG: Tuple[Diagram, ...] = (
    _diagram(
        "Request Lifecycle",
        ("Client", "Server", "Database"),
        (
            ("Client", "Server", "send request", False),
            ("Server", "Database", "query data", False),
            ("Database", "Server", "return rows", True),
            ("Server", "Client", "send response", True),
        ),
    ),
    _diagram(
        "Authentication Flow",
        ("User", "AuthService", "TokenStore"),
        (
            ("User", "AuthService", "submit credentials", False),
            ("AuthService", "TokenStore", "issue token", False),
            ("TokenStore", "AuthService", "token created", True),
            ("AuthService", "User", "return token", True),
        ),
    ),
    _diagram(
        "Data Processing Pipeline",
        ("Scheduler", "Worker", "Storage"),
        (
            ("Scheduler", "Worker", "dispatch job", False),
            ("Worker", "Storage", "write results", False),
            ("Storage", "Worker", "acknowledge write", True),
            ("Worker", "Scheduler", "report completion", True),
        ),
    ),
    _diagram(
        "Service Integration",
        ("Gateway", "Service", "ExternalApi"),
        (
            ("Gateway", "Service", "forward call", False),
            ("Service", "ExternalApi", "fetch resource", False),
            ("ExternalApi", "Service", "resource payload", True),
            ("Service", "Gateway", "aggregated result", True),
        ),
    ),
)


class FallbackSynthesizer:
    """Deterministic, total selection from the fallback catalog."""

    def __init__(self, catalog: Tuple[Diagram, ...] = FALLBACK_CATALOG):
        if not catalog:
            raise ValueError("fallback catalog must not be empty")
        self.catalog = catalog

    def fallback(self, ordinal: int) -> Diagram:
        return self.catalog[ordinal % len(self.catalog)]


# Singleton instance for reuse
_fallback_instance = None

def get_fallback_synthesizer() -> FallbackSynthesizer:
    """Get singleton FallbackSynthesizer instance"""
    global _fallback_instance
    if _fallback_instance is None:
        _fallback_instance = FallbackSynthesizer()
    return _fallback_instance


def fallback_diagram(ordinal: int) -> Diagram:
    """Convenience function returning the catalog entry for an ordinal"""
    return get_fallback_synthesizer().fallback(ordinal)
