"""
Main Orchestrator for FinVue Ledger

This module ties together the ledger service and the external
collaborators, and defines the end-to-end flows for:
1. Advisory tips (scoped approved entries → Gemini → tips)
2. Cloud sync (snapshot → webhook / spreadsheet → lastSynced)
3. Branding (uploaded image → data URI → logo / avatar)
4. Export (visible entries → .xlsx report)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Collaborators never mutate the ledger directly
- A failed collaborator call leaves the ledger unchanged
- Every step is audited
"""

from datetime import datetime
from pathlib import Path
from typing import NamedTuple, Optional

from finvue.agents import EMPTY_LEDGER_TIPS, FALLBACK_TIPS, AdvisoryAgent
from finvue.audit import AuditLogger, configure_logging, create_correlation_id
from finvue.config import get_settings
from finvue.exceptions import AuthorizationError, ExternalServiceError, ValidationError
from finvue.ledger import LedgerService, LedgerStore
from finvue.models.audit import AuditEventBuilder
from finvue.models.ledger import AdvisoryTip, AppState, User, ValidationIssue
from finvue.services.export import ExportResult, export_transactions
from finvue.services.media import ImageEncoder
from finvue.services.storage import (
    AuditStorageInterface,
    JsonFileStateStorage,
    JsonLinesAuditStorage,
    StateStorageInterface,
)
from finvue.services.sync import (
    GoogleSheetsSyncService,
    WebhookSyncService,
    sync_service_for,
)


class AdvisoryFlow:
    """
    Produces advisory tips for the current actor.

    Tips live here, not in the ledger document: the most recent
    completed request wins.
    """

    def __init__(
        self,
        service: LedgerService,
        agent: Optional[AdvisoryAgent] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._service = service
        self._agent = agent
        self._audit = audit_logger or AuditLogger()
        self.latest_tips: list[AdvisoryTip] = []

    def _get_agent(self) -> AdvisoryAgent:
        if self._agent is None:
            self._agent = AdvisoryAgent()
        return self._agent

    async def refresh_tips(self, actor: Optional[User] = None) -> list[AdvisoryTip]:
        """
        Ask the advisory engine about the actor's approved entries.

        Never raises for engine problems; the fallback tips are
        returned instead and the failure is audited.
        """
        transactions = self._service.advisory_input(actor)
        correlation_id = create_correlation_id()

        try:
            agent = self._get_agent()
        except Exception as e:
            # Missing API key or similar configuration problem
            self._audit.log(AuditEventBuilder.advisory_fallback_used(str(e), correlation_id))
            tips = list(FALLBACK_TIPS) if transactions else list(EMPTY_LEDGER_TIPS)
            self.latest_tips = tips
            return tips

        tips = await agent.generate_tips(transactions)
        if agent.last_error:
            self._audit.log(AuditEventBuilder.advisory_fallback_used(agent.last_error, correlation_id))

        self.latest_tips = tips
        return tips


class CloudSyncFlow:
    """
    Pushes a ledger snapshot to the configured sheet URL.

    On success the only local change is `last_synced`.
    """

    def __init__(
        self,
        service: LedgerService,
        audit_logger: Optional[AuditLogger] = None,
        webhook: Optional[WebhookSyncService] = None,
        sheets: Optional[GoogleSheetsSyncService] = None,
    ):
        self._service = service
        self._audit = audit_logger or AuditLogger()
        self._webhook = webhook
        self._sheets = sheets

    async def sync(self, actor: Optional[User] = None) -> str:
        """
        Push the current state.

        Returns the human-readable sync time recorded in the ledger.

        Raises:
            AuthorizationError: nobody logged in
            ValidationError: no sheet URL configured
            ExternalServiceError: the remote side did not accept the push
        """
        if actor is None and self._service.current_user is None:
            raise AuthorizationError("No user is logged in", action="sync")

        state: AppState = self._service.state
        if not state.sheet_url:
            raise ValidationError(
                "No sheet URL configured",
                issues=[ValidationIssue(
                    field="sheet_url",
                    issue_type="missing",
                    message="Configure the sheet URL in settings before syncing",
                )],
            )

        url = state.sheet_url
        correlation_id = create_correlation_id()
        transport = sync_service_for(url, webhook=self._webhook, sheets=self._sheets)

        if not await transport.push(url, state):
            message = f"Push to {url} was not accepted"
            self._audit.log(AuditEventBuilder.sync_failed(url, message, correlation_id))
            self._audit.log_external_service_error(transport.name, message, correlation_id)
            raise ExternalServiceError(transport.name, message)

        synced_at = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        self._service.record_sync(synced_at)
        self._audit.log(AuditEventBuilder.sync_completed(
            url, len(state.transactions), synced_at, correlation_id,
        ))
        return synced_at


class BrandingFlow:
    """Logo and avatar uploads."""

    def __init__(
        self,
        service: LedgerService,
        encoder: Optional[ImageEncoder] = None,
    ):
        self._service = service
        self._encoder = encoder or ImageEncoder()

    def upload_logo(self, image_bytes: bytes, actor: Optional[User] = None) -> AppState:
        return self._service.update_settings(
            company_logo=self._encoder.to_data_uri(image_bytes),
            actor=actor,
        )

    def upload_avatar(
        self,
        user_id: str,
        image_bytes: bytes,
        actor: Optional[User] = None,
    ) -> User:
        return self._service.set_avatar(
            user_id,
            self._encoder.to_data_uri(image_bytes),
            actor=actor,
        )


class ExportFlow:
    """Spreadsheet report of what the actor is allowed to see."""

    def __init__(
        self,
        service: LedgerService,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._service = service
        self._audit = audit_logger or AuditLogger()

    def export(
        self,
        directory: Optional[Path] = None,
        actor: Optional[User] = None,
    ) -> ExportResult:
        transactions = self._service.visible_transactions(actor)
        try:
            result = export_transactions(transactions, directory=directory)
        except OSError as e:
            self._audit.log_error("export_failed", str(e), details={"directory": str(directory)})
            raise
        actor = actor or self._service.current_user
        self._audit.log(AuditEventBuilder.export_generated(
            result.filename, result.row_count, actor.id if actor else None,
        ))
        return result


class AppComponents(NamedTuple):
    service: LedgerService
    advisory: AdvisoryFlow
    sync: CloudSyncFlow
    branding: BrandingFlow
    export: ExportFlow


def create_app_components(
    state_storage: Optional[StateStorageInterface] = None,
    audit_storage: Optional[AuditStorageInterface] = None,
    persist_audit: bool = True,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        state_storage: Ledger document backend. Defaults to the JSON
                       file under the configured data directory.
        audit_storage: Audit trail backend. Defaults to a JSON-lines
                       file next to the ledger document.
        persist_audit: Set to False to log audit events locally only.

    Returns:
        AppComponents with the ledger service and all flows
    """
    settings = get_settings()
    configure_logging(settings.app.log_level)

    if persist_audit and audit_storage is None:
        audit_storage = JsonLinesAuditStorage()
    audit_logger = AuditLogger(audit_storage if persist_audit else None)

    store = LedgerStore(state_storage or JsonFileStateStorage(), settings.ledger)
    service = LedgerService(store, audit_logger=audit_logger)

    return AppComponents(
        service=service,
        advisory=AdvisoryFlow(service, audit_logger=audit_logger),
        sync=CloudSyncFlow(service, audit_logger=audit_logger),
        branding=BrandingFlow(service),
        export=ExportFlow(service, audit_logger=audit_logger),
    )
