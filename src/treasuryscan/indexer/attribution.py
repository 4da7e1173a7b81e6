"""Contributor attribution with single-hop proxy redirection."""

from treasuryscan.domain.models.transfer import Attribution, TransactionContext, TransferEvent


def is_proxy(address: str, proxy_set: frozenset[str]) -> bool:
    """`proxy_set` holds lowercased addresses, as built by IndexerConfig.proxy_set."""
    return address.lower() in proxy_set


def resolve_contributor(
    event: TransferEvent,
    tx: TransactionContext,
    proxy_set: frozenset[str],
) -> Attribution:
    """Credit the transaction sender when the transfer came out of a known proxy."""
    if is_proxy(event.from_address, proxy_set):
        return Attribution(contributor=tx.sender, proxy_used=True)
    return Attribution(contributor=event.from_address, proxy_used=False)
