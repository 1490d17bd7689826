"""
ConfigRegistry -- owner of the per-deployment tax configuration record.

Responsibility:
    Creates the configuration record once, serves immutable snapshots of it,
    and applies authority-gated mutations to the exemption list and the LP
    destination list.

Invariants enforced:
    - Create-once: initialize() raises AlreadyInitializedError when a record
      already exists at the derived address.
    - Authority gate: every mutation compares the caller with the stored
      authority before touching anything.
    - Capacity ceiling: 64 exemptions, 16 LP accounts.
    - Idempotence: adding a present identity or removing an absent one is a
      no-op (still authority-checked).
    - Immutable economics: there is no method that changes authority, rates
      or routing wallets.

Concurrency:
    Mutations load the record with SELECT ... FOR UPDATE so two mutations,
    or a mutation and a transfer read, never interleave partial state on
    PostgreSQL.  The lock is released when the caller's transaction ends.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tax_kernel.constants import (
    DEFAULT_FOUNDER_BPS,
    DEFAULT_MARKETING_BPS,
    DEFAULT_TAX_BPS,
    MAX_EXEMPT_ADDRS,
    MAX_LP_ACCOUNTS,
)
from tax_kernel.domain.identity import Identity, IdentityLike, derive_config_address
from tax_kernel.domain.policy import ConfigSnapshot
from tax_kernel.exceptions import (
    AlreadyInitializedError,
    CapacityExceededError,
    ConfigNotInitializedError,
    UnauthorizedError,
)
from tax_kernel.logging_config import get_logger
from tax_kernel.models.config import ExemptEntry, LpAccountEntry, TaxConfig
from tax_kernel.services.base import BaseService

logger = get_logger("services.config_registry")

EXEMPT_REGISTRY = "exempt"
LP_REGISTRY = "lp_accounts"


class ConfigRegistry(BaseService):
    """
    Service for the configuration record of one deployment.

    All public methods return ConfigSnapshot DTOs, never ORM rows.
    """

    def __init__(self, session: Session, program_id: IdentityLike):
        super().__init__(session)
        self.program_id = Identity.coerce(program_id)
        self.config_address = derive_config_address(self.program_id)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _find(self, for_update: bool = False) -> TaxConfig | None:
        stmt = select(TaxConfig).where(TaxConfig.address == self.config_address)
        if for_update:
            stmt = stmt.with_for_update()
        return self.session.execute(stmt).scalar_one_or_none()

    def _load(self, for_update: bool = False) -> TaxConfig:
        config = self._find(for_update=for_update)
        if config is None:
            raise ConfigNotInitializedError(str(self.config_address))
        return config

    def _to_dto(self, config: TaxConfig) -> ConfigSnapshot:
        return ConfigSnapshot(
            address=config.address,
            authority=config.authority,
            founder_wallet=config.founder_wallet,
            marketing_wallet=config.marketing_wallet,
            ritual_vault_wallet=config.ritual_vault_wallet,
            tax_bps=config.tax_bps,
            founder_bps=config.founder_bps,
            marketing_bps=config.marketing_bps,
            exempt=tuple(e.identity for e in config.exempt_entries),
            lp_accounts=tuple(e.identity for e in config.lp_entries),
        )

    def get_config(self) -> ConfigSnapshot:
        """
        Snapshot of the configuration record.

        Raises:
            ConfigNotInitializedError: initialize() has not run.
        """
        return self._to_dto(self._load())

    def find_config(self) -> ConfigSnapshot | None:
        """Snapshot of the configuration record, or None before initialize()."""
        config = self._find()
        return self._to_dto(config) if config is not None else None

    def is_exempt(self, identity: IdentityLike) -> bool:
        return self.get_config().is_exempt(Identity.coerce(identity))

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(
        self,
        authority: IdentityLike,
        founder_wallet: IdentityLike,
        marketing_wallet: IdentityLike,
        ritual_vault_wallet: IdentityLike,
    ) -> ConfigSnapshot:
        """
        Create the configuration record with default 300/200/100 bps.

        The signer becomes the authority.  The three wallets seed the
        exemption list, deduplicated, in founder / marketing / ritual-vault
        order.

        Raises:
            AlreadyInitializedError: a record already exists.
        """
        if self._find() is not None:
            raise AlreadyInitializedError(str(self.config_address))

        founder = Identity.coerce(founder_wallet)
        marketing = Identity.coerce(marketing_wallet)
        ritual_vault = Identity.coerce(ritual_vault_wallet)

        config = TaxConfig(
            address=self.config_address,
            program_id=self.program_id,
            authority=Identity.coerce(authority),
            founder_wallet=founder,
            marketing_wallet=marketing,
            ritual_vault_wallet=ritual_vault,
            tax_bps=DEFAULT_TAX_BPS,
            founder_bps=DEFAULT_FOUNDER_BPS,
            marketing_bps=DEFAULT_MARKETING_BPS,
        )
        for wallet in dict.fromkeys((founder, marketing, ritual_vault)):
            config.exempt_entries.append(
                ExemptEntry(identity=wallet, position=len(config.exempt_entries))
            )

        self.session.add(config)
        try:
            self.session.flush()
        except IntegrityError as exc:
            # Another transaction created the record first
            raise AlreadyInitializedError(str(self.config_address)) from exc

        logger.info(
            "config_initialized",
            extra={
                "config_address": str(config.address),
                "authority": str(config.authority),
                "tax_bps": config.tax_bps,
                "founder_bps": config.founder_bps,
                "marketing_bps": config.marketing_bps,
                "exempt_count": len(config.exempt_entries),
            },
        )
        return self._to_dto(config)

    # ------------------------------------------------------------------
    # Authority-gated mutations
    # ------------------------------------------------------------------

    def _load_as_authority(self, caller: IdentityLike) -> TaxConfig:
        config = self._load(for_update=True)
        caller_id = Identity.coerce(caller)
        if caller_id != config.authority:
            logger.warning(
                "config_mutation_unauthorized",
                extra={"caller": str(caller_id)},
            )
            raise UnauthorizedError(str(caller_id), str(config.authority), "authority")
        return config

    def add_exempt(self, caller: IdentityLike, identity: IdentityLike) -> ConfigSnapshot:
        """Add a wallet owner to the tax-exempt list (authority only)."""
        config = self._load_as_authority(caller)
        self._add_entry(
            config.exempt_entries, ExemptEntry, Identity.coerce(identity),
            EXEMPT_REGISTRY, MAX_EXEMPT_ADDRS,
        )
        return self._to_dto(config)

    def remove_exempt(self, caller: IdentityLike, identity: IdentityLike) -> ConfigSnapshot:
        """
        Remove a wallet owner from the tax-exempt list (authority only).

        Removing a core wallet only drops the explicit entry; core wallets
        stay exempt through ConfigSnapshot.is_exempt.
        """
        config = self._load_as_authority(caller)
        self._remove_entry(config.exempt_entries, Identity.coerce(identity), EXEMPT_REGISTRY)
        return self._to_dto(config)

    def add_destination(self, caller: IdentityLike, identity: IdentityLike) -> ConfigSnapshot:
        """Register an LP destination token account (authority only)."""
        config = self._load_as_authority(caller)
        self._add_entry(
            config.lp_entries, LpAccountEntry, Identity.coerce(identity),
            LP_REGISTRY, MAX_LP_ACCOUNTS,
        )
        return self._to_dto(config)

    def remove_destination(self, caller: IdentityLike, identity: IdentityLike) -> ConfigSnapshot:
        """Unregister an LP destination token account (authority only)."""
        config = self._load_as_authority(caller)
        self._remove_entry(config.lp_entries, Identity.coerce(identity), LP_REGISTRY)
        return self._to_dto(config)

    add_lp_account = add_destination
    remove_lp_account = remove_destination

    def _add_entry(self, entries, entry_cls, identity: Identity, registry: str, capacity: int) -> None:
        if any(e.identity == identity for e in entries):
            logger.debug(
                "registry_entry_already_present",
                extra={"registry": registry, "identity": str(identity)},
            )
            return
        if len(entries) >= capacity:
            raise CapacityExceededError(registry, capacity)

        next_position = max((e.position for e in entries), default=-1) + 1
        entries.append(entry_cls(identity=identity, position=next_position))
        self.session.flush()

        logger.info(
            "registry_entry_added",
            extra={"registry": registry, "identity": str(identity), "size": len(entries)},
        )

    def _remove_entry(self, entries, identity: Identity, registry: str) -> None:
        entry = next((e for e in entries if e.identity == identity), None)
        if entry is None:
            logger.debug(
                "registry_entry_absent",
                extra={"registry": registry, "identity": str(identity)},
            )
            return
        entries.remove(entry)
        self.session.flush()

        logger.info(
            "registry_entry_removed",
            extra={"registry": registry, "identity": str(identity), "size": len(entries)},
        )
