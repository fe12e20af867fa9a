from __future__ import annotations

import asyncio
import importlib
import importlib.util
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Callable, Optional

from xero_cli.errors import (
    ConfigurationError,
    RemoteCallFailure,
    UnknownMethod,
    XeroCliError,
)
from xero_cli.logging import get_logger
from xero_cli.types import AccessGrant, InvokeResult, SdkResponse

logger = get_logger("dispatch")

# Bindings receive the access grant first, then the positional arguments
# built by the resolver. They may be plain functions or coroutines.
SdkMethod = Callable[..., Any]


class DispatchTable:
    """Explicit ``(api identifier, method name) -> callable`` registry."""

    def __init__(self) -> None:
        self._bindings: dict[tuple[str, str], SdkMethod] = {}

    def register(
        self,
        api_identifier: str,
        method_name: str,
        fn: SdkMethod,
    ) -> None:
        key = (api_identifier, method_name)
        if key in self._bindings:
            logger.debug(
                f"Replacing SDK binding for {api_identifier}.{method_name}"
            )
        self._bindings[key] = fn

    def binding(self, api_identifier: str, method_name: str):
        def decorator(fn: SdkMethod) -> SdkMethod:
            self.register(api_identifier, method_name, fn)
            return fn

        return decorator

    def lookup(
        self, api_identifier: str, method_name: str
    ) -> Optional[SdkMethod]:
        return self._bindings.get((api_identifier, method_name))

    def require(
        self, alias: str, api_identifier: str, method_name: str
    ) -> SdkMethod:
        fn = self.lookup(api_identifier, method_name)
        if fn is None:
            raise UnknownMethod(
                alias,
                method_name,
                "No SDK binding is registered for it; check XERO_SDK_MODULE.",
            )
        return fn

    def keys(self) -> list[tuple[str, str]]:
        return list(self._bindings)

    def __contains__(self, key: object) -> bool:
        return key in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)


def load_dispatch_table(module_ref: Optional[str]) -> DispatchTable:
    """
    Build the dispatch table from an SDK binding module.

    ``module_ref`` is a dotted module name or a path to a ``.py`` file. The
    module must define ``register(table)`` or ``build_dispatch_table()``.
    Without a module the table is empty and every invocation fails with
    ``UnknownMethod`` before credentials are touched.
    """
    table = DispatchTable()
    if not module_ref:
        return table

    module = _import_binding_module(module_ref)

    if hasattr(module, "build_dispatch_table"):
        built = module.build_dispatch_table()
        if not isinstance(built, DispatchTable):
            raise ConfigurationError(
                f"{module_ref}.build_dispatch_table() must return a DispatchTable"
            )
        table = built
    elif hasattr(module, "register"):
        module.register(table)
    else:
        raise ConfigurationError(
            f"SDK binding module {module_ref} defines neither "
            "register(table) nor build_dispatch_table()"
        )

    logger.debug(
        f"Loaded {len(table)} SDK bindings from {module_ref}"
    )
    return table


def _import_binding_module(module_ref: str):
    if module_ref.endswith(".py"):
        path = Path(module_ref).expanduser()
        spec = importlib.util.spec_from_file_location(
            "xero_sdk_bindings", path
        )
        if spec is None or spec.loader is None or not path.is_file():
            raise ConfigurationError(
                f"SDK binding file not found: {path}"
            )
        module = importlib.util.module_from_spec(spec)
        try:
            spec.loader.exec_module(module)
        except Exception as load_error:
            raise ConfigurationError(
                f"Failed to load SDK binding file {path}: {load_error}"
            ) from load_error
        return module

    try:
        return importlib.import_module(module_ref)
    except ImportError as import_error:
        raise ConfigurationError(
            f"Failed to import SDK binding module {module_ref}: {import_error}"
        ) from import_error


async def call_sdk_method(
    fn: SdkMethod,
    grant: AccessGrant,
    args: tuple[Any, ...],
) -> InvokeResult:
    try:
        result = fn(grant, *args)
        if asyncio.iscoroutine(result):
            result = await result
    except XeroCliError:
        raise
    except Exception as call_error:
        raise RemoteCallFailure(
            str(call_error) or type(call_error).__name__,
            status=_status_of(getattr(call_error, "response", call_error)),
        ) from call_error

    return to_invoke_result(result)


def to_invoke_result(result: Any) -> InvokeResult:
    if isinstance(result, InvokeResult):
        return result
    if isinstance(result, SdkResponse):
        return InvokeResult(status=result.status, body=result.body)
    if (
        isinstance(result, Mapping)
        and "response" in result
        and "body" in result
    ):
        return InvokeResult(
            status=_status_of(result["response"]),
            body=result["body"],
        )
    return InvokeResult(status=None, body=result)


def _status_of(value: Any) -> Optional[int]:
    if isinstance(value, Mapping):
        status = value.get("status", value.get("statusCode"))
    else:
        status = getattr(value, "status", None)
        if status is None:
            status = getattr(value, "statusCode", None)
    return status if isinstance(status, int) else None
