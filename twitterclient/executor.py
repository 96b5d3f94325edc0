"""
Request Executor
Single path that builds, authenticates, sends and interprets every request,
delivering the outcome as a return value, a callback or a future.
"""

import asyncio
from typing import Any, Callable, Dict, Optional, Set

from .auth import AuthRequirement, Credential, CredentialProvider
from .errors import classify_response
from .logger import logger
from .models import OutgoingRequest, Response
from .transport import Transport

Callback = Callable[[Optional[BaseException], Any], None]
Parser = Callable[[Response], Any]
Finisher = Callable[[Any], Any]


class RequestExecutor:
    """Dispatch core shared by the blocking, callback and future call styles."""

    def __init__(self, provider: CredentialProvider, transport: Optional[Transport] = None):
        self.provider = provider
        self.transport = transport or Transport()
        self._pending: Set[asyncio.Task] = set()

    def _prepare(self, method: str, url: str, params: Optional[Dict[str, Any]],
                 form: Optional[Dict[str, Any]], json: Any, headers: Optional[Dict[str, str]],
                 auth: AuthRequirement, credential: Optional[Credential],
                 oauth_params: Optional[Dict[str, str]]) -> OutgoingRequest:
        request = OutgoingRequest(
            method=method,
            url=url,
            headers=dict(headers or {}),
            params={k: str(v) for k, v in (params or {}).items()},
            form={k: str(v) for k, v in form.items()} if form is not None else None,
            json=json,
        )
        return self.provider.authenticate(request, auth, credential=credential, oauth_params=oauth_params)

    @staticmethod
    def _complete(response: Response, lenient: bool, parser: Optional[Parser],
                  finish: Optional[Finisher]) -> Any:
        value = classify_response(response, lenient, parser)
        if finish is not None:
            value = finish(value)
        return value

    def execute(self, method: str, url: str, *, params: Optional[Dict[str, Any]] = None,
                form: Optional[Dict[str, Any]] = None, json: Any = None,
                headers: Optional[Dict[str, str]] = None,
                auth: AuthRequirement = AuthRequirement.NONE, lenient: bool = False,
                parser: Optional[Parser] = None, finish: Optional[Finisher] = None,
                credential: Optional[Credential] = None,
                oauth_params: Optional[Dict[str, str]] = None,
                callback: Optional[Callback] = None):
        """
        Execute a request, blocking unless a callback is given.

        Args:
            method: HTTP method
            url: Absolute URL
            params: Query parameters
            form: Form-encoded body
            json: JSON body
            headers: Extra headers
            auth: Authentication the endpoint needs
            lenient: Return the raw Response for any status
            parser: Turns a successful response into the returned value
            finish: Applied to the parsed value before it is delivered
            credential: Credential to use instead of the current one
            oauth_params: Extra oauth_* parameters to sign
            callback: ``callback(error, value)``, called once from the event loop

        Returns:
            The value when blocking, the scheduled task when a callback is given
        """
        if callback is not None:
            task = self.execute_p(method, url, params=params, form=form, json=json,
                                  headers=headers, auth=auth, lenient=lenient, parser=parser,
                                  finish=finish, credential=credential, oauth_params=oauth_params)
            return self.attach(task, callback)

        request = self._prepare(method, url, params, form, json, headers, auth, credential, oauth_params)
        response = self.transport.send(request)
        return self._complete(response, lenient, parser, finish)

    def execute_p(self, method: str, url: str, *, params: Optional[Dict[str, Any]] = None,
                  form: Optional[Dict[str, Any]] = None, json: Any = None,
                  headers: Optional[Dict[str, str]] = None,
                  auth: AuthRequirement = AuthRequirement.NONE, lenient: bool = False,
                  parser: Optional[Parser] = None, finish: Optional[Finisher] = None,
                  credential: Optional[Credential] = None,
                  oauth_params: Optional[Dict[str, str]] = None) -> "asyncio.Task":
        """Schedule a request on the running event loop and return its pending task."""
        return self._spawn(self._execute_async(
            method, url, params, form, json, headers, auth, lenient, parser, finish,
            credential, oauth_params,
        ))

    async def _execute_async(self, method, url, params, form, json, headers, auth, lenient,
                             parser, finish, credential, oauth_params):
        request = self._prepare(method, url, params, form, json, headers, auth, credential, oauth_params)
        response = await self.transport.send_async(request)
        return self._complete(response, lenient, parser, finish)

    def reject(self, error: BaseException, callback: Optional[Callback] = None) -> "asyncio.Task":
        """Deliver a locally detected error through the future or callback channel."""
        async def _fail():
            raise error

        task = self._spawn(_fail())
        if callback is not None:
            return self.attach(task, callback)
        return task

    def attach(self, task: "asyncio.Task", callback: Callback) -> "asyncio.Task":
        task.add_done_callback(lambda t: self._deliver(t, callback))
        return task

    def _spawn(self, coro) -> "asyncio.Task":
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            coro.close()
            raise RuntimeError("Callback and future styles need a running asyncio event loop") from None
        task = loop.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    @staticmethod
    def _deliver(task: "asyncio.Task", callback: Callback):
        if task.cancelled():
            logger.debug("Request task cancelled, callback not invoked")
            return
        error = task.exception()
        if error is not None:
            callback(error, None)
        else:
            callback(None, task.result())
