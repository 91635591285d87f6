from pathlib import Path
from typing import Optional, Tuple


class PromptManager:
    """
    Loads prompt templates from per-purpose folders (e.g. `summarizer/`,
    `assistant/`) under a common base directory.
    """

    def __init__(self, prompts_base_path: Path):
        """
        Args:
            prompts_base_path: The root directory holding the prompt folders.
        """
        prompts_base_path = Path(prompts_base_path)
        if not prompts_base_path.is_dir():
            raise FileNotFoundError(f"Prompts base directory not found at: {prompts_base_path}")
        self.prompts_base_path = prompts_base_path

    def _read_file(self, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise FileNotFoundError(f"Prompt file not found at: {path}")
        except OSError as e:
            raise IOError(f"Error reading prompt file at {path}: {e}")

    def load_prompt(self, prompts_dir: str, filename: str) -> str:
        """
        Loads a single prompt file.

        Args:
            prompts_dir: The name of the prompt folder.
            filename: The name of the file to load (e.g., 'system.prompt').

        Returns:
            The content of the prompt file as a string.
        """
        prompt_dir = self.prompts_base_path / prompts_dir
        if not prompt_dir.is_dir():
            raise FileNotFoundError(f"Prompt directory '{prompts_dir}' not found at {prompt_dir}")

        return self._read_file(prompt_dir / filename)

    def get_standard_prompts(
        self,
        prompts_dir: str,
        system_filename: str = "system.prompt",
        user_filename: str = "user.prompt",
    ) -> Tuple[str, Optional[str]]:
        """
        Loads the system prompt and, if present, the user prompt template.

        Returns:
            A tuple of the system prompt and the user prompt or None.
        """
        system_prompt = self.load_prompt(prompts_dir, system_filename)
        user_prompt = None
        try:
            user_prompt = self.load_prompt(prompts_dir, user_filename)
        except FileNotFoundError:
            # A folder may only define a system prompt.
            pass

        return system_prompt, user_prompt
