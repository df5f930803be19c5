"""
shopflow - synchronized end-to-end verification of a storefront purchase flow.
"""

from .cart import CartControls, CartSynchronizer
from .config import FlowConfig, load_config
from .errors import (
    ActionFailedError,
    ActionTimeoutError,
    DriverFault,
    FaultKind,
    FlowError,
    IllegalTransitionError,
    UnsupportedConfigError,
)
from .executor import PollingActionExecutor
from .models import (
    DEFAULT_WAIT_POLICY,
    AddItemsResult,
    Locator,
    OperationResult,
    RemoveItemResult,
    StepOutcome,
    WaitPolicy,
)
from .pages import (
    CartPage,
    CheckoutCompletePage,
    CheckoutInfoPage,
    CheckoutOverviewPage,
    LoginPage,
    ProductsPage,
    start_flow,
)
from .sorting import SortCriterion, SortVerifier

__version__ = "0.1.0"

__all__ = [
    "ActionFailedError",
    "ActionTimeoutError",
    "AddItemsResult",
    "CartControls",
    "CartPage",
    "CartSynchronizer",
    "CheckoutCompletePage",
    "CheckoutInfoPage",
    "CheckoutOverviewPage",
    "DEFAULT_WAIT_POLICY",
    "DriverFault",
    "FaultKind",
    "FlowConfig",
    "FlowError",
    "IllegalTransitionError",
    "Locator",
    "LoginPage",
    "OperationResult",
    "PollingActionExecutor",
    "ProductsPage",
    "RemoveItemResult",
    "SortCriterion",
    "SortVerifier",
    "StepOutcome",
    "UnsupportedConfigError",
    "WaitPolicy",
    "load_config",
    "start_flow",
]
