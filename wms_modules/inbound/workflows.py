"""
Inbound Workflows.

State machine for the purchase order lifecycle.
"""

from wms_kernel.domain.workflow import Guard, Transition, Workflow
from wms_kernel.logging_config import get_logger

logger = get_logger("modules.inbound.workflows")


# -----------------------------------------------------------------------------
# Guards
# -----------------------------------------------------------------------------

ALL_LINES_RECEIVED = Guard(
    name="all_lines_received",
    description="Every line has received at least its ordered quantity",
)

SOME_LINES_OPEN = Guard(
    name="some_lines_open",
    description="At least one line still has quantity left to receive",
)

logger.info(
    "inbound_workflow_guards_defined",
    extra={
        "guards": [
            ALL_LINES_RECEIVED.name,
            SOME_LINES_OPEN.name,
        ],
    },
)


# -----------------------------------------------------------------------------
# Purchase Order Workflow
# -----------------------------------------------------------------------------

DRAFT = "draft"
SUBMITTED = "submitted"
PARTIALLY_RECEIVED = "partially_received"
FULLY_RECEIVED = "fully_received"
CANCELLED = "cancelled"

PURCHASE_ORDER_WORKFLOW = Workflow(
    name="inbound_purchase_order",
    description="Purchase order lifecycle from draft to fully received",
    initial_state=DRAFT,
    states=(
        DRAFT,
        SUBMITTED,
        PARTIALLY_RECEIVED,
        FULLY_RECEIVED,
        CANCELLED,
    ),
    transitions=(
        Transition(DRAFT, SUBMITTED, action="submit"),
        # Receiving is accepted from any open state, including draft.
        Transition(DRAFT, PARTIALLY_RECEIVED, action="receive", guard=SOME_LINES_OPEN),
        Transition(DRAFT, FULLY_RECEIVED, action="receive", guard=ALL_LINES_RECEIVED),
        Transition(SUBMITTED, PARTIALLY_RECEIVED, action="receive", guard=SOME_LINES_OPEN),
        Transition(SUBMITTED, FULLY_RECEIVED, action="receive", guard=ALL_LINES_RECEIVED),
        Transition(PARTIALLY_RECEIVED, PARTIALLY_RECEIVED, action="receive", guard=SOME_LINES_OPEN),
        Transition(PARTIALLY_RECEIVED, FULLY_RECEIVED, action="receive", guard=ALL_LINES_RECEIVED),
        Transition(DRAFT, CANCELLED, action="cancel"),
        Transition(SUBMITTED, CANCELLED, action="cancel"),
        Transition(PARTIALLY_RECEIVED, CANCELLED, action="cancel"),
    ),
    terminal_states=(FULLY_RECEIVED, CANCELLED),
)

logger.info(
    "inbound_purchase_order_workflow_registered",
    extra={
        "workflow_name": PURCHASE_ORDER_WORKFLOW.name,
        "state_count": len(PURCHASE_ORDER_WORKFLOW.states),
        "transition_count": len(PURCHASE_ORDER_WORKFLOW.transitions),
        "initial_state": PURCHASE_ORDER_WORKFLOW.initial_state,
    },
)
