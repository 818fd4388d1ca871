"""FastRouter structured JSON generation.

Sends a system/user prompt pair to FastRouter's OpenAI-compatible chat
completions endpoint in JSON mode and validates the decoded content.

The validator is either a pydantic model class (the content is validated
into an instance of it) or a predicate ``(value) -> bool`` (the decoded
JSON is returned as-is when the predicate accepts it).
"""

import logging
from typing import Any, Callable, Optional, Type, Union

from pydantic import BaseModel, ValidationError

from valentine_flows.config.providers import FastRouterConfig
from valentine_flows.core.providers.base import AdapterOptions, ProviderAdapter
from valentine_flows.core.providers.shared import (
    first_message_content,
    read_json,
    safe_json_parse,
)

logger = logging.getLogger(__name__)

GENERATION_TEMPERATURE = 0.7

Validator = Union[Type[BaseModel], Callable[[Any], bool]]

_NO_JSON = object()


class StructuredGenerationAdapter(ProviderAdapter):
    """Structured generation capability backed by FastRouter.

    Best-effort fallback: the ``fallback`` argument of ``generate``.
    """

    provider = "fastrouter"
    breaker_key = "fastrouter-generate"
    failure_message = "FastRouter generation failed"
    default_timeout = 6.0

    def __init__(self, config: Optional[FastRouterConfig] = None, registry=None, **kwargs: Any):
        super().__init__(config or FastRouterConfig(), registry, **kwargs)

    @property
    def model(self) -> str:
        """Model id sent with every request."""
        return self._config.model

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        validator: Validator,
        options: Optional[AdapterOptions] = None,
        *,
        fallback: Any = None,
    ) -> Any:
        """Generate a JSON object and validate it.

        Args:
            system_prompt: System message
            user_prompt: User message
            validator: Pydantic model class or predicate over the decoded JSON
            options: Timeout/retry overrides (default: 6.0s, no retries)
            fallback: Value returned in best-effort mode on failure

        Returns:
            The validated value

        Raises:
            FlowError: In strict mode, on any failure
        """

        async def call() -> Any:
            self._require_config(self._config.is_configured, "FastRouter API key is not configured")
            response = await self._request(
                "POST",
                self._config.api_url,
                options,
                headers={
                    "Content-Type": "application/json",
                    "Authorization": f"Bearer {self._config.api_key}",
                },
                json={
                    "model": self._config.model,
                    "messages": [
                        {"role": "system", "content": system_prompt},
                        {"role": "user", "content": user_prompt},
                    ],
                    "response_format": {"type": "json_object"},
                    "stream": False,
                    "temperature": GENERATION_TEMPERATURE,
                },
            )
            content = first_message_content(read_json(response, {}))
            if not content:
                raise self._invalid("FastRouter returned empty content")
            return self._validate(safe_json_parse(content, _NO_JSON), validator)

        return await self._run(call, fallback=fallback)

    def _validate(self, parsed: Any, validator: Validator) -> Any:
        if parsed is _NO_JSON:
            raise self._invalid("FastRouter returned content that is not valid JSON")

        if isinstance(validator, type) and issubclass(validator, BaseModel):
            try:
                return validator.model_validate(parsed)
            except ValidationError as e:
                logger.debug("FastRouter content rejected by %s: %d error(s)", validator.__name__, e.error_count())
                raise self._invalid(
                    "FastRouter response failed schema validation",
                    e.errors(include_url=False, include_context=False, include_input=False),
                ) from e

        if not validator(parsed):
            raise self._invalid("FastRouter response failed schema validation")
        return parsed
