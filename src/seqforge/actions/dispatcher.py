"""Chat actions that run the sequence generation pipeline.

Each invocation goes through parse -> build -> generate and always ends in
exactly one persisted outcome. No error raised inside the pipeline reaches
the hosting runtime; failures become user-readable outcomes plus log entries.
"""

import logging
from typing import ClassVar

from seqforge.actions.context import ActionContext, Message
from seqforge.actions.outcome import ActionOutcome, ActionRun, ActionState
from seqforge.generation.client import GenerationClient
from seqforge.generation.config import CREDENTIAL_SETTING, GenerationConfig, get_generation_config
from seqforge.generation.errors import (
    AuthConfigError,
    ErrorKind,
    GenerationError,
    RequestValidationError,
    classify_error,
)
from seqforge.generation.input_parser import InputParser
from seqforge.generation.models import GenerationResponse
from seqforge.generation.request_builder import RequestBuilder
from seqforge.traits.decoder import MappingTable, SequenceDecoder, TraitValue, load_mapping_table

logger = logging.getLogger(__name__)

GUIDANCE_TEXT = (
    "I can generate a DNA sequence if you give me a starting sequence and a total "
    'length, for example: "generate a DNA sequence starting with ATG, length 50". '
    "The starting sequence may only contain A, C, G and T, and the length must be "
    "longer than it."
)
FAILURE_TEXT = "Sorry, I couldn't generate the DNA sequence right now. Please try again later."
CONFIG_ERROR_TEXT = (
    f"DNA generation is not configured: no API credential is set ({CREDENTIAL_SETTING})."
)

# Default triggers of EvolveTraitsAction. GenerateSequenceAction leaves messages
# carrying them to that action.
TRAIT_TRIGGERS = ("evolve traits", "decode traits", "dna traits")


class GenerateSequenceAction:
    """Generates a DNA sequence from a chat request and stores the result.

    Example:
        >>> action = GenerateSequenceAction()
        >>> message = Message(text="starting with ATG, length 50", conversation_id="c1")
        >>> if action.validate(context, message):
        ...     await action.handle(context, message)
        # context.memory received "Generated DNA sequence: ATG..."
    """

    name: ClassVar[str] = "GENERATE_DNA_SEQUENCE"
    similes: ClassVar[tuple[str, ...]] = ("GENERATE_SEQUENCE", "EVO2_GENERATE", "DNA_GENERATION")
    description: ClassVar[str] = (
        "Generate a DNA sequence from a starting sequence and a total length"
    )

    # Whether a parseable request alone, without a trigger phrase, makes the action apply
    validate_on_parse: ClassVar[bool] = True
    # Phrases that hand the message to another action even when it parses
    deferred_phrases: ClassVar[tuple[str, ...]] = TRAIT_TRIGGERS

    def __init__(
        self,
        config: GenerationConfig | None = None,
        parser: InputParser | None = None,
        builder: RequestBuilder | None = None,
        client: GenerationClient | None = None,
        trigger_phrases: tuple[str, ...] | None = None,
    ) -> None:
        """Initialize the action with optional dependency injection.

        Args:
            config: Generation configuration. If not provided, loads from environment.
            parser: Input parser; a default one if not provided.
            builder: Request builder; a default one if not provided.
            client: Generation client; one built from ``config`` if not provided.
            trigger_phrases: Phrases that make the action apply. Defaults to
                the configured trigger phrases.
        """
        self._config = config or get_generation_config()
        self._defaults = self._config.get_request_defaults()
        self._parser = parser or InputParser()
        self._builder = builder or RequestBuilder(self._defaults)
        self._client = client or GenerationClient(self._config)
        self._triggers = tuple(
            phrase.lower() for phrase in (trigger_phrases or self._config.trigger_phrases)
        )

    @property
    def trigger_phrases(self) -> tuple[str, ...]:
        return self._triggers

    def validate(self, context: ActionContext, message: Message) -> bool:
        """Return True if this action applies to ``message``."""
        if self._parser.has_trigger(message.text, self.deferred_phrases):
            return False
        if self._parser.has_trigger(message.text, self._triggers):
            return True
        return self.validate_on_parse and self._parser.parse(message.text) is not None

    async def handle(self, context: ActionContext, message: Message) -> bool:
        """Run the pipeline for ``message`` and persist its outcome.

        Always returns True: every failure is turned into a persisted outcome.
        """
        await self.run(context, message)
        return True

    async def run(self, context: ActionContext, message: Message) -> ActionOutcome:
        """Run the pipeline for an already validated message.

        Returns:
            The outcome that was written to ``context.memory``.
        """
        run = ActionRun(message.conversation_id)
        run.transition(ActionState.VALIDATED)
        run.transition(ActionState.EXECUTING)

        try:
            outcome = await self._execute(context, message)
        except Exception as e:
            logger.exception(
                "Unexpected error in %s for conversation %s", self.name, message.conversation_id
            )
            outcome = ActionOutcome.failed(ErrorKind.UNKNOWN, FAILURE_TEXT, detail=str(e))

        run.transition(outcome.state)
        self._persist(context, message, outcome)
        return outcome

    async def _execute(self, context: ActionContext, message: Message) -> ActionOutcome:
        conversation_id = message.conversation_id

        try:
            credential = self._resolve_credential(context)
        except AuthConfigError as e:
            logger.error(
                "No credential for %s: %s",
                self.name,
                e,
                extra={"conversation_id": conversation_id},
            )
            return ActionOutcome.failed(e.kind, CONFIG_ERROR_TEXT, detail=str(e))

        fields = self._parser.parse(message.text)
        if fields is None:
            logger.info("No recognized request phrasing in conversation %s", conversation_id)
            return ActionOutcome.rejected(ErrorKind.PARSE_MISS, GUIDANCE_TEXT)

        try:
            request = self._builder.build(fields, self._defaults)
        except RequestValidationError as e:
            logger.info("Invalid request in conversation %s: %s", conversation_id, e)
            return ActionOutcome.rejected(ErrorKind.VALIDATION, GUIDANCE_TEXT, detail=str(e))

        try:
            response = await self._client.generate(request, credential)
        except GenerationError as e:
            kind = classify_error(e)
            logger.error(
                "Generation failed (%s) in conversation %s: %s",
                kind,
                conversation_id,
                e,
                extra={"conversation_id": conversation_id, "error_kind": str(kind)},
            )
            return ActionOutcome.failed(kind, FAILURE_TEXT, detail=str(e))

        logger.info(
            "Generated %d nucleotides for conversation %s",
            len(response.generated_sequence),
            conversation_id,
        )
        return ActionOutcome.handled(self.format_result(response))

    def format_result(self, response: GenerationResponse) -> str:
        """Turn a successful response into the text that gets persisted."""
        return f"Generated DNA sequence: {response.generated_sequence}"

    def _resolve_credential(self, context: ActionContext) -> str:
        credential = context.get_setting(CREDENTIAL_SETTING) or self._config.get_api_key()
        if not credential:
            raise AuthConfigError(f"{CREDENTIAL_SETTING} is not set")
        return credential

    def _persist(self, context: ActionContext, message: Message, outcome: ActionOutcome) -> None:
        try:
            context.memory.write(outcome.text, message.conversation_id)
        except Exception:
            logger.exception(
                "Failed to persist %s outcome for conversation %s",
                outcome.status,
                message.conversation_id,
            )


class EvolveTraitsAction(GenerateSequenceAction):
    """Generates a sequence and decodes it into agent traits.

    Only applies when the message carries one of its trigger phrases, so plain
    generation requests stay with GenerateSequenceAction.

    Example:
        >>> table = load_mapping_table("traits.json")
        >>> action = EvolveTraitsAction(table, chunk_size=4)
        >>> await action.handle(context, Message(
        ...     text="evolve traits starting with ATCG, length 40", conversation_id="c1"))
        # context.memory received 'Decoded traits: {"behavior": "cooperative", ...}'
    """

    name: ClassVar[str] = "EVOLVE_AGENT_TRAITS"
    similes: ClassVar[tuple[str, ...]] = ("DECODE_TRAITS", "DNA_TRAITS", "EVOLVE_PERSONALITY")
    description: ClassVar[str] = (
        "Generate a DNA sequence and decode it into a structured trait record"
    )
    validate_on_parse: ClassVar[bool] = False
    deferred_phrases: ClassVar[tuple[str, ...]] = ()

    DEFAULT_TRIGGERS: ClassVar[tuple[str, ...]] = TRAIT_TRIGGERS

    def __init__(
        self,
        table: MappingTable,
        chunk_size: int,
        initial_traits: dict[str, TraitValue] | None = None,
        config: GenerationConfig | None = None,
        parser: InputParser | None = None,
        builder: RequestBuilder | None = None,
        client: GenerationClient | None = None,
        trigger_phrases: tuple[str, ...] | None = None,
    ) -> None:
        """Initialize the action.

        Args:
            table: Chunk to trait patch lookup.
            chunk_size: Decode chunk length.
            initial_traits: Values every decoded record starts from.
            config: Generation configuration. If not provided, loads from environment.
            parser: Input parser; a default one if not provided.
            builder: Request builder; a default one if not provided.
            client: Generation client; one built from ``config`` if not provided.
            trigger_phrases: Phrases that make the action apply.

        Raises:
            ValueError: If ``chunk_size`` is less than 1.
        """
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be at least 1, got {chunk_size}")
        super().__init__(
            config=config,
            parser=parser,
            builder=builder,
            client=client,
            trigger_phrases=trigger_phrases or self.DEFAULT_TRIGGERS,
        )
        self._table = table
        self._chunk_size = chunk_size
        self._decoder = SequenceDecoder(initial_traits)

    @classmethod
    def from_config(
        cls,
        config: GenerationConfig | None = None,
        client: GenerationClient | None = None,
    ) -> "EvolveTraitsAction":
        """Build the action from TRAIT_TABLE_PATH and TRAIT_CHUNK_SIZE.

        Raises:
            ValueError: If no trait table path is configured.
            MappingTableError: If the table cannot be loaded.
        """
        config = config or get_generation_config()
        if config.trait_table_path is None:
            raise ValueError("TRAIT_TABLE_PATH is not set")
        table = load_mapping_table(config.trait_table_path)
        return cls(table, config.trait_chunk_size, config=config, client=client)

    def format_result(self, response: GenerationResponse) -> str:
        record = self._decoder.decode(response.generated_sequence, self._table, self._chunk_size)
        logger.info(
            "Decoded %d traits from %d matching chunks",
            len(record.traits),
            len(record.matched_chunks),
        )
        return f"Decoded traits: {record.to_json()}"
