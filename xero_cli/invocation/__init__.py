from .dispatch import (
    DispatchTable,
    call_sdk_method,
    load_dispatch_table,
    to_invoke_result,
)
from .engine import InvocationEngine, build_engine
from .param_tokens import parse_param_tokens, split_param_token
from .parameter_parser import ParameterParser, parse_parameter
from .resolver import (
    InvocationPlan,
    InvocationResolver,
    ResolvedInvocation,
)

__all__ = [
    "DispatchTable",
    "call_sdk_method",
    "load_dispatch_table",
    "to_invoke_result",
    "InvocationEngine",
    "build_engine",
    "parse_param_tokens",
    "split_param_token",
    "ParameterParser",
    "parse_parameter",
    "InvocationPlan",
    "InvocationResolver",
    "ResolvedInvocation",
]
