import asyncio
import logging
import sys
import uuid
from pathlib import Path

from dotenv import load_dotenv

from chatcontext.llm import ChatService, LLMFactory
from chatcontext.memory import ConversationMemoryService, Message, ModelMetadata, Role, SessionState
from chatcontext.utils.config_parser import PROMPTS_DIR, find_project_root, load_app_config
from chatcontext.utils.session_file import load_session, save_session

# --- LOGGING AND ENVIRONMENT SETUP ---
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stdout,
)
# Suppress excessively noisy logs from underlying HTTP libraries for cleaner output
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("urllib3").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)

try:
    PROJECT_ROOT = find_project_root()
except FileNotFoundError:
    PROJECT_ROOT = Path.cwd()
load_dotenv(PROJECT_ROOT / ".env")


def print_welcome_message(model_metadata: ModelMetadata):
    """Prints the welcome message and instructions."""
    print("\n--- Chat with context window management ---")
    print(f"Model: {model_metadata.provider} / {model_metadata.name}")
    print("Type 'exit' or 'quit' to end the session.")
    print("  /clear         forget the conversation")
    print("  /history       show the full conversation")
    print("  /models        list the selectable models")
    print("  /model <name>  switch model (starts a new conversation)")
    print("----------------------------------------------------------\n")


def print_history(memory_service: ConversationMemoryService):
    for message in memory_service.get_full_history():
        label = "You" if message.role == Role.USER else "AI"
        print(f"{label}: {message.content}")
    print(f"\n[{len(memory_service.get_working_log())} messages in the working context]\n")


def format_available_models(llm_factory: LLMFactory, model_metadata: ModelMetadata) -> str:
    """Lists each provider's display name and models, marking the current one."""
    providers = llm_factory.get_available_providers()
    lines = []
    for provider_key, models in llm_factory.get_available_models().items():
        lines.append(f"{providers.get(provider_key, provider_key)}:")
        for name in models:
            marker = "*" if name == model_metadata.name else " "
            lines.append(f"  {marker} {name}")
    return "\n".join(lines)


def switch_model(
    model_name: str,
    model_metadata: ModelMetadata,
    llm_factory: LLMFactory,
    memory_service: ConversationMemoryService,
) -> ModelMetadata:
    """
    Points the session at another model and starts the conversation afresh.

    Raises:
        ValueError: If no configured provider serves the model.
    """
    provider_key = llm_factory.get_provider_for_model(model_name)
    memory_service.clear()
    logger.info(f"Switched model to '{provider_key}' / '{model_name}'.")
    return ModelMetadata(
        session_id=model_metadata.session_id,
        provider=provider_key,
        name=model_name,
    )


async def submit_turn(
    chat_service: ChatService,
    memory_service: ConversationMemoryService,
    model_metadata: ModelMetadata,
    user_input: str,
) -> Message:
    """
    Sends one user message and returns the model's reply.

    A user message left unanswered by a failed turn is reused when the same
    text is sent again, so a retry does not duplicate it.
    """
    pending = memory_service.current()
    if pending is None or pending.role != Role.USER or pending.content != user_input:
        memory_service.add_message(role=Role.USER, content=user_input)
    await chat_service.send_message(model_metadata, memory_service)
    return memory_service.current()


async def run_conversation():
    """Runs the interactive loop, resuming and saving the session file."""
    app_config = load_app_config()
    chat_config = app_config.chat
    session_path = PROJECT_ROOT / chat_config.session_file

    saved_session = load_session(session_path)
    if saved_session is not None:
        model_metadata = saved_session.model_metadata
        conversation_state = saved_session.message_context
        logger.info(f"Resuming session {model_metadata.session_id} from '{session_path}'.")
    else:
        model_metadata = ModelMetadata(
            session_id=str(uuid.uuid4()),
            provider=chat_config.default_provider,
            name=chat_config.default_model,
        )
        conversation_state = None

    memory_service = ConversationMemoryService.from_config(
        app_config=app_config,
        prompts_base_path=PROMPTS_DIR,
        initial_state=conversation_state,
    )
    chat_service = ChatService.from_config(app_config=app_config, prompts_base_path=PROMPTS_DIR)

    print_welcome_message(model_metadata)

    while True:
        try:
            user_input = input("You: ").strip()
        except (KeyboardInterrupt, EOFError):
            print("\nSession ended.")
            break

        if not user_input:
            continue
        if user_input.lower() in ["exit", "quit"]:
            print("\nGoodbye!")
            break
        if user_input == "/clear":
            memory_service.clear()
            print("Conversation cleared.\n")
        elif user_input == "/history":
            print_history(memory_service)
            continue
        elif user_input == "/models":
            print(format_available_models(chat_service.llm_factory, model_metadata) + "\n")
            continue
        elif user_input.startswith("/model "):
            try:
                model_metadata = switch_model(
                    user_input[len("/model "):].strip(),
                    model_metadata,
                    chat_service.llm_factory,
                    memory_service,
                )
            except ValueError as e:
                print(f"{e}\n")
                continue
            print(f"Now using {model_metadata.provider} / {model_metadata.name}. Conversation cleared.\n")
        else:
            try:
                reply = await submit_turn(chat_service, memory_service, model_metadata, user_input)
                print(f"AI: {reply.content}\n")
            except Exception as e:
                # The question stays unanswered in the conversation; sending it again retries the turn.
                print(f"AI: I'm sorry, an error occurred: {e}\n")

        save_session(
            session_path,
            SessionState(
                model_metadata=model_metadata,
                message_context=memory_service.serialize(),
            ),
        )


def main():
    try:
        asyncio.run(run_conversation())
    except Exception as e:
        logging.critical("Failed to run the conversation", exc_info=True)
        print(f"\nFATAL: Could not run the session. Error: {e}")


if __name__ == "__main__":
    main()
