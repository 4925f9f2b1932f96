"""Resolve a telegram request to its canned response."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from telestub.core.exceptions import FormatViolationError, InjectedFailure
from telestub.core.protocols import IFormatOracle
from telestub.core.types import FieldMap, TransactionId
from telestub.fixtures.cells import composite_key, has_value
from telestub.fixtures.index import DefaultSnapshot, IndexedRecord, StubSnapshot

logger = logging.getLogger(__name__)

RAISE_EXCEPTION_FIELD = "raiseException"
RAISE_EXCEPTION_VALUE = "Exception"


class ResolutionEngine:
    """Applies stub lookup, default fallback and failure injection.

    Stub hit: the request is copied and every field the fixture row fills in
    overwrites it. Otherwise the default row is copied and the request
    overwrites it. Either way a ``raiseException`` field is removed from the
    response, and a value of ``Exception`` turns the call into a failure.
    """

    def __init__(
        self,
        format_oracle: IFormatOracle | None = None,
        request_suffix: str = "S",
        response_suffix: str = "R",
    ) -> None:
        self._format_oracle = format_oracle
        self._request_suffix = request_suffix
        self._response_suffix = response_suffix

    def search(
        self, stub: StubSnapshot, transaction_id: TransactionId, request: Mapping[str, Any]
    ) -> IndexedRecord | None:
        """First fixture row matched by the most specific key list."""
        for key_list in stub.candidates(transaction_id):
            hit = stub.lookup(transaction_id, composite_key(key_list, request))
            if hit is not None:
                return hit
        return None

    def resolve(
        self,
        transaction_id: TransactionId,
        request: Mapping[str, Any],
        stub: StubSnapshot,
        defaults: DefaultSnapshot,
    ) -> FieldMap:
        logger.info("request data [%s%s]: [%s]", transaction_id, self._request_suffix, dict(request))

        hit = self.search(stub, transaction_id, request) if transaction_id in stub.records else None
        if hit is None:
            response = self._default_response(transaction_id, request, defaults)
            failure = self._pop_injected_failure(transaction_id, response)
        else:
            response = self._stub_response(request, hit)
            failure = self._pop_injected_failure(transaction_id, response)
            self._check_format(transaction_id, response, hit)

        if failure is not None:
            logger.info("failure injected as the response of telegram %s", transaction_id,
                        exc_info=failure)
            raise failure
        logger.info("response data [%s%s]: [%s]", transaction_id, self._response_suffix, response)
        return response

    @staticmethod
    def _stub_response(request: Mapping[str, Any], hit: IndexedRecord) -> FieldMap:
        response = dict(request)
        for name, value in hit.fields.items():
            if has_value(value):
                response[name] = value
        return response

    @staticmethod
    def _default_response(
        transaction_id: TransactionId, request: Mapping[str, Any], defaults: DefaultSnapshot
    ) -> FieldMap:
        response: FieldMap = {}
        default = defaults.records.get(transaction_id)
        if default is None:
            logger.warning("no default data exists. books:%s telegram:[%s]",
                           [str(path) for path in defaults.observed or {}], transaction_id)
        else:
            # empty default cells answer as empty text
            response.update(
                (name, "" if value is None else value) for name, value in default.fields.items()
            )
        response.update(request)
        return response

    @staticmethod
    def _pop_injected_failure(transaction_id: TransactionId, response: FieldMap) -> InjectedFailure | None:
        setting = response.pop(RAISE_EXCEPTION_FIELD, None)
        if isinstance(setting, str) and setting.lower() == RAISE_EXCEPTION_VALUE.lower():
            return InjectedFailure(transaction_id, setting)
        return None

    def _check_format(self, transaction_id: TransactionId, response: FieldMap, hit: IndexedRecord) -> None:
        """Every response field must exist in the response layout.

        The request layout only has to exist. Layouts without field names
        place no constraint.
        """
        if self._format_oracle is None:
            return
        self._format_oracle.fields_for(f"{transaction_id}{self._request_suffix}")
        known = self._format_oracle.fields_for(f"{transaction_id}{self._response_suffix}")
        if not known:
            return
        for name in response:
            if name not in known:
                raise FormatViolationError(transaction_id, name, str(hit.source))
