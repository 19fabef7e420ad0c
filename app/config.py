from pydantic_settings import BaseSettings

from app.prompts import SYSTEM_PROMPT


class Settings(BaseSettings):
    # Ollama
    ollama_base_url: str = "http://ollama:11434"
    ollama_model: str = "mistral-small3.1:24b"
    system_prompt: str = SYSTEM_PROMPT

    # Generation
    reply_max_tokens: int = 1024
    reply_temperature: float = 0.8
    summary_max_tokens: int = 256
    summary_temperature: float = 0.3

    # Database
    database_path: str = "data/parallel_lives.db"

    # User memory
    history_max_messages: int = 20
    decisions_max: int = 50
    context_messages: int = 10
    context_decisions: int = 5
    summary_interval: int = 5  # total messages (user + assistant) between summaries

    # Logging
    log_level: str = "INFO"
    log_json: bool = True
    log_file: str = "data/parallel_lives.log"

    model_config = {"env_file": ".env"}
