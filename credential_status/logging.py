# SPDX-FileCopyrightText: 2024 Swiss Confederation
#
# SPDX-License-Identifier: MIT

from enum import Enum

from common.logging import operations


class StatusOperationsLogEntry(operations.OperationsLogEntry):
    """Container for credential status operations specific logging."""

    class Operation(Enum):
        setup = "SETUP"
        allocation = "ALLOCATION"
        update = "UPDATE"

    class Step(Enum):
        setup_bootstrap = "BOOTSTRAP"
        setup_reconcile = "RECONCILE"
        allocation_reuse = "REUSE"
        allocation_reserve = "RESERVE"
        allocation_rollover = "ROLLOVER"
        allocation_abort = "ALLOCATION_ABORT"
        update_revoke = "REVOKE"
        update_reactivate = "REACTIVATE"
        update_abort = "UPDATE_ABORT"

    operation: Operation
    step: Step

    credential_id: str | None = None
    status_list_id: str | None = None
    status_list_index: int | None = None
