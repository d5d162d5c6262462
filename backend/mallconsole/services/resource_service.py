"""Shared CRUD/query contract for the three remote collections.

Each resource service wraps one document collection. Services hold no state
between calls apart from the collection name: every operation goes back to
the store. Failures never raise out of a service; they come back as a failed
``ServiceResult`` carrying a ``ValidationError``, ``NotFoundError`` or
``RemoteError`` detail.
"""

import math
from typing import Any, ClassVar, Dict, FrozenSet, Generic, List, Mapping, Optional, Tuple, Type, TypeVar, Union

import structlog
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from mallconsole.core.exceptions import (
    MallConsoleException,
    NotFoundError,
    RemoteError,
    ValidationError,
)
from mallconsole.schemas.base import DocumentModel, FormModel
from mallconsole.schemas.common import ServiceResult
from mallconsole.store.document_store import SERVER_TIMESTAMP, DocumentStore, DocumentStoreError

logger = structlog.get_logger(__name__)

DocT = TypeVar("DocT", bound=DocumentModel)
FormT = TypeVar("FormT", bound=FormModel)


def trim(value: Optional[str]) -> str:
    """Strip surrounding whitespace; missing values become ''."""
    return (value or "").strip()


def coerce_number(value: Any) -> float:
    """Parse a float; missing, unparseable or non-finite input becomes 0.

    Callers cannot tell an explicit zero from a failed parse.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def describe_validation_error(exc: PydanticValidationError) -> str:
    """First pydantic error as 'Invalid <field>: <reason>'."""
    error = exc.errors()[0]
    field = ".".join(str(part) for part in error.get("loc", ())) or "value"
    return f"Invalid {field}: {error.get('msg', 'invalid value')}"


def parse_form(form_model: Type[FormModel], data: Mapping[str, Any]) -> FormModel:
    """Validate raw form input into ``form_model``.

    Raises:
        ValidationError: If a field has the wrong type or format
    """
    try:
        return form_model.model_validate(dict(data))
    except PydanticValidationError as e:
        raise ValidationError(describe_validation_error(e)) from e


class ResourceService(Generic[DocT, FormT]):
    """Base class for collection-backed services.

    Subclasses declare the collection, models, required fields and search
    fields, and implement ``_build_fields`` to turn a form into stored fields.
    """

    collection: ClassVar[str]
    resource_name: ClassVar[str]
    document_model: ClassVar[Type[DocumentModel]]
    form_model: ClassVar[Type[FormModel]]
    # camelCase keys that must be non-empty in every written record
    required_fields: ClassVar[Tuple[str, ...]] = ()
    required_message: ClassVar[str] = "Required fields are missing"
    # snake_case attributes matched by search()
    search_fields: ClassVar[Tuple[str, ...]] = ()
    # camelCase keys written on update even when empty
    keep_empty_on_update: ClassVar[FrozenSet[str]] = frozenset()

    def __init__(self, store: DocumentStore):
        """Initialize the service.

        Args:
            store: Document store to read from and write to
        """
        self.store = store
        self.logger = logger.bind(service=f"{self.collection}_service")

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def _build_fields(self, form: FormT, *, for_update: bool) -> Dict[str, Any]:
        """Trim, coerce and default form values into stored (camelCase) fields.

        On update, fields the form did not supply are left out.
        """
        raise NotImplementedError

    def _validate_record(self, record: Mapping[str, Any]) -> None:
        """Check the record that is about to be stored.

        Raises:
            ValidationError: If a required field is missing or empty
        """
        if any(is_blank(record.get(key)) for key in self.required_fields):
            raise ValidationError(self.required_message)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _ref(self):
        return self.store.collection(self.collection)

    def _to_form(self, form: Union[FormT, Mapping[str, Any]]) -> FormT:
        """Typed form from a mapping.

        Raises:
            ValidationError: If a field has the wrong type or format
        """
        if isinstance(form, BaseModel):
            return form
        return parse_form(self.form_model, form)

    def _to_document(self, raw: Dict[str, Any]) -> DocT:
        """Model a stored document.

        Raises:
            RemoteError: If the stored fields do not fit the document model
        """
        try:
            return self.document_model.model_validate(raw)
        except PydanticValidationError as e:
            doc_id = raw.get("id")
            reason = describe_validation_error(e)
            self.logger.warning(f"{self.collection}_malformed_document", doc_id=doc_id, error=reason)
            raise RemoteError(f"Malformed {self.resource_name.lower()} document {doc_id}: {reason}") from e

    def _to_documents(self, raw: List[Dict[str, Any]]) -> List[DocT]:
        return [self._to_document(d) for d in raw]

    def _fail(self, event: str, exc: Exception, **context: Any) -> ServiceResult:
        if not isinstance(exc, MallConsoleException):
            exc = RemoteError(str(exc))
        self.logger.error(event, error=exc.message, code=exc.code, **context)
        return ServiceResult.fail(exc)

    async def _query(self, event: str, filters: Tuple[Tuple[str, Any], ...]) -> ServiceResult:
        """Equality query evaluated by the store."""
        try:
            query = self._ref()
            for field, value in filters:
                query = query.where(field, value)
            docs = self._to_documents(await query.get_all())
        except (DocumentStoreError, RemoteError) as e:
            return self._fail(f"{event}_failed", e)

        self.logger.info(event, count=len(docs), **{f: v for f, v in filters})
        return ServiceResult.ok(docs)

    # ------------------------------------------------------------------
    # Contract
    # ------------------------------------------------------------------

    async def list_all(self) -> ServiceResult:
        """Fetch every document in storage order."""
        try:
            docs = self._to_documents(await self._ref().get_all())
        except (DocumentStoreError, RemoteError) as e:
            return self._fail(f"{self.collection}_list_failed", e)

        self.logger.info(f"{self.collection}_retrieved", count=len(docs))
        return ServiceResult.ok(docs)

    async def get_by_id(self, doc_id: str) -> ServiceResult:
        """Fetch one document; NotFound if absent."""
        try:
            raw = await self._ref().get(doc_id)
            if raw is None:
                return ServiceResult.fail(NotFoundError(self.resource_name, doc_id))
            doc = self._to_document(raw)
        except (DocumentStoreError, RemoteError) as e:
            return self._fail(f"{self.collection}_get_failed", e, doc_id=doc_id)

        return ServiceResult.ok(doc)

    async def create(self, form: Union[FormT, Mapping[str, Any]]) -> ServiceResult:
        """Validate locally, then write a new document and return its id.

        Nothing is sent to the store when validation fails.
        """
        try:
            form = self._to_form(form)
            if any(is_blank(getattr(form, _snake(key))) for key in self.required_fields):
                raise ValidationError(self.required_message)
            fields = self._build_fields(form, for_update=False)
            self._validate_record(fields)
        except MallConsoleException as e:
            self.logger.warning(f"{self.collection}_create_rejected", error=e.message)
            return ServiceResult.fail(e)

        fields["createdAt"] = SERVER_TIMESTAMP
        fields["updatedAt"] = SERVER_TIMESTAMP
        try:
            doc_id = await self._ref().add(fields)
        except DocumentStoreError as e:
            return self._fail(f"{self.collection}_create_failed", e)

        self.logger.info(f"{self.collection}_created", doc_id=doc_id)
        return ServiceResult.ok(id=doc_id)

    async def update(self, doc_id: str, form: Union[FormT, Mapping[str, Any]]) -> ServiceResult:
        """Write the supplied, non-empty fields over an existing document.

        The merged record (existing fields plus patch) must still satisfy the
        required-field rule.
        """
        try:
            form = self._to_form(form)
            patch = {
                key: value
                for key, value in self._build_fields(form, for_update=True).items()
                if key in self.keep_empty_on_update or value not in ("", [])
            }
        except MallConsoleException as e:
            return ServiceResult.fail(e)

        try:
            existing = await self._ref().get(doc_id)
            if existing is None:
                return ServiceResult.fail(NotFoundError(self.resource_name, doc_id))

            try:
                self._validate_record({**existing, **patch})
            except ValidationError as e:
                self.logger.warning(f"{self.collection}_update_rejected", doc_id=doc_id, error=e.message)
                return ServiceResult.fail(e)

            patch["updatedAt"] = SERVER_TIMESTAMP
            await self._ref().update(doc_id, patch)
        except DocumentStoreError as e:
            return self._fail(f"{self.collection}_update_failed", e, doc_id=doc_id)

        self.logger.info(f"{self.collection}_updated", doc_id=doc_id, fields=sorted(patch))
        return ServiceResult.ok(id=doc_id)

    async def delete(self, doc_id: str) -> ServiceResult:
        """Delete by id; whatever the store does for a missing id stands."""
        try:
            await self._ref().delete(doc_id)
        except DocumentStoreError as e:
            return self._fail(f"{self.collection}_delete_failed", e, doc_id=doc_id)

        self.logger.info(f"{self.collection}_deleted", doc_id=doc_id)
        return ServiceResult.ok(id=doc_id)

    async def search(self, query: Optional[str]) -> ServiceResult:
        """Case-insensitive substring match over the service's search fields.

        A blank query behaves exactly like ``list_all()``.
        """
        term = (query or "").strip().lower()
        result = await self.list_all()
        if not term or not result.success:
            return result

        matches = [
            doc for doc in result.data
            if any(term in (getattr(doc, f, "") or "").lower() for f in self.search_fields)
        ]
        self.logger.info(f"{self.collection}_searched", query=query, count=len(matches))
        return ServiceResult.ok(matches)


def _snake(camel: str) -> str:
    out = []
    for ch in camel:
        if ch.isupper():
            out.append("_")
            out.append(ch.lower())
        else:
            out.append(ch)
    return "".join(out)
