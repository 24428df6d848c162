"""
services/account_service.py
---------------------------
Account deletion orchestrator.

Removes a user and everything they own, as an explicit state machine:

    VERIFYING → SCOPING → DELETING_BOXES → RESETTING_CODES
      → DELETING_LOCATIONS → DELETING_MEMBERSHIPS → DELETING_WORKSPACES
      → DELETING_PROFILE → REVOKING_AUTH → DONE

Every step runs on the same session and the whole sequence is committed
once, after identity revocation. The first failing step rolls everything
back and raises an error carrying the stage it failed in, so a partial
deletion is never left behind and the call can simply be retried.

Steps are methods so that each one can be exercised (and made to fail)
in isolation.
"""

from enum import Enum

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from box_organizer.core.errors import (
    AccountDeletionError,
    AuthRevocationError,
    UserAccountNotFoundError,
)
from box_organizer.core.logging import get_logger
from box_organizer.models.box import Box
from box_organizer.models.location import Location
from box_organizer.models.profile import Profile
from box_organizer.models.qr_code import QrCode, QrStatus
from box_organizer.models.workspace import Workspace, WorkspaceMember
from box_organizer.services.identity_service import IdentityProvider

logger = get_logger(__name__)


class DeletionStage(str, Enum):
    VERIFYING = "verifying"
    SCOPING = "scoping"
    DELETING_BOXES = "deleting_boxes"
    RESETTING_CODES = "resetting_codes"
    DELETING_LOCATIONS = "deleting_locations"
    DELETING_MEMBERSHIPS = "deleting_memberships"
    DELETING_WORKSPACES = "deleting_workspaces"
    DELETING_PROFILE = "deleting_profile"
    REVOKING_AUTH = "revoking_auth"
    DONE = "done"


class AccountDeletionService:

    def __init__(self, db: AsyncSession, identity: IdentityProvider) -> None:
        self.db = db
        self.identity = identity
        self.stage = DeletionStage.VERIFYING

    def _enter(self, stage: DeletionStage, user_id: str) -> None:
        self.stage = stage
        logger.info("Account deletion step", user_id=user_id, stage=stage.value)

    # ── Steps ────────────────────────────────────────────────────────────────

    async def _owned_workspace_ids(self, user_id: str) -> list[str]:
        result = await self.db.execute(select(Workspace.id).where(Workspace.owner_id == user_id))
        return list(result.scalars().all())

    async def _delete_boxes(self, workspace_ids: list[str]) -> int:
        result = await self.db.execute(delete(Box).where(Box.workspace_id.in_(workspace_ids)))
        return result.rowcount

    async def _reset_codes(self, workspace_ids: list[str]) -> int:
        result = await self.db.execute(
            update(QrCode)
            .where(
                QrCode.workspace_id.in_(workspace_ids),
                QrCode.status == QrStatus.assigned.value,
            )
            .values(status=QrStatus.generated.value, box_id=None)
        )
        return result.rowcount

    async def _delete_locations(self, workspace_ids: list[str]) -> int:
        result = await self.db.execute(
            delete(Location).where(Location.workspace_id.in_(workspace_ids))
        )
        return result.rowcount

    async def _delete_memberships(self, workspace_ids: list[str]) -> int:
        result = await self.db.execute(
            delete(WorkspaceMember).where(WorkspaceMember.workspace_id.in_(workspace_ids))
        )
        return result.rowcount

    async def _delete_workspaces(self, user_id: str) -> int:
        # Filtered by owner, not by the scoped ids: joined workspaces survive.
        result = await self.db.execute(delete(Workspace).where(Workspace.owner_id == user_id))
        return result.rowcount

    async def _delete_profile(self, user_id: str) -> None:
        await self.db.execute(delete(WorkspaceMember).where(WorkspaceMember.user_id == user_id))
        await self.db.execute(delete(Profile).where(Profile.id == user_id))

    # ── Orchestration ────────────────────────────────────────────────────────

    async def delete_account(self, user_id: str) -> str:
        """
        Delete ``user_id`` and all workspaces they own.

        Raises:
            UserAccountNotFoundError: no profile for ``user_id``; nothing changed.
            AccountDeletionError: a store step failed; everything rolled back.
            AuthRevocationError: identity revocation failed; everything rolled back.
        """
        self._enter(DeletionStage.VERIFYING, user_id)
        profile = await self.db.get(Profile, user_id)
        if profile is None:
            logger.warning("Account deletion for unknown user", user_id=user_id)
            raise UserAccountNotFoundError()

        try:
            self._enter(DeletionStage.SCOPING, user_id)
            workspace_ids = await self._owned_workspace_ids(user_id)

            if workspace_ids:
                self._enter(DeletionStage.DELETING_BOXES, user_id)
                boxes = await self._delete_boxes(workspace_ids)

                self._enter(DeletionStage.RESETTING_CODES, user_id)
                codes = await self._reset_codes(workspace_ids)

                self._enter(DeletionStage.DELETING_LOCATIONS, user_id)
                locations = await self._delete_locations(workspace_ids)

                self._enter(DeletionStage.DELETING_MEMBERSHIPS, user_id)
                members = await self._delete_memberships(workspace_ids)

                self._enter(DeletionStage.DELETING_WORKSPACES, user_id)
                workspaces = await self._delete_workspaces(user_id)

                logger.info(
                    "Owned workspaces removed",
                    user_id=user_id,
                    workspaces=workspaces,
                    boxes=boxes,
                    codes_reset=codes,
                    locations=locations,
                    memberships=members,
                )

            self._enter(DeletionStage.DELETING_PROFILE, user_id)
            await self._delete_profile(user_id)

            self._enter(DeletionStage.REVOKING_AUTH, user_id)
            await self.identity.revoke(self.db, user_id)

            await self.db.commit()
        except AuthRevocationError as exc:
            await self.db.rollback()
            exc.stage = self.stage.value
            logger.error("Account deletion failed", user_id=user_id, stage=self.stage.value, error=exc.message)
            raise
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.error(
                "Account deletion failed",
                user_id=user_id,
                stage=self.stage.value,
                error=str(exc),
            )
            raise AccountDeletionError(
                f"Account deletion failed at stage '{self.stage.value}'",
                stage=self.stage.value,
            ) from exc

        self._enter(DeletionStage.DONE, user_id)
        return user_id
