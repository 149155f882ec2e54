"""Resolution of the Extension Warehouse credentials."""

from pathlib import Path
from typing import Callable, Dict, Optional

from dotenv import dotenv_values
from rich.prompt import Prompt

from ew_signer.core.errors import CredentialMissing
from ew_signer.core.models import Credentials
from ew_signer.utils.logging import get_logger

logger = get_logger(__name__)

USERNAME_VARIABLE = "EW_USERNAME"
PASSWORD_VARIABLE = "EW_PASSWORD"
DEFAULT_ENV_FILE = Path(".env")

# (message, hide_input) -> answer
Prompter = Callable[[str, bool], str]


def rich_prompt(message: str, password: bool) -> str:
    return Prompt.ask(message, password=password)


class CredentialProvider:
    """
    Resolves credentials from flags, then a dotenv file, then the terminal.

    Each source only fills the fields the previous ones left empty, and the
    terminal is asked at most once per field.
    """

    def __init__(self, prompter: Optional[Prompter] = rich_prompt):
        """
        Args:
            prompter: Interactive prompt, None disables prompting
        """
        self.prompter = prompter
        self.logger = logger.bind(component="credential_provider")

    def resolve(
        self,
        username: Optional[str] = None,
        password: Optional[str] = None,
        env_file: Optional[Path] = None,
    ) -> Credentials:
        """
        Resolve a username and password.

        Args:
            username: Value of the --username flag
            password: Value of the --password flag
            env_file: Dotenv file to read, None to skip it

        Raises:
            CredentialMissing: If a field cannot be resolved
        """
        if env_file is not None and not (username and password):
            values = self._load_env_file(Path(env_file))
            username = username or values.get(USERNAME_VARIABLE)
            password = password or values.get(PASSWORD_VARIABLE)

        username = username or self._ask("username", "Extension Warehouse username", hide=False)
        password = password or self._ask("password", "Extension Warehouse password", hide=True)

        return Credentials(username=username, password=password)

    def _load_env_file(self, env_file: Path) -> Dict[str, Optional[str]]:
        if not env_file.is_file():
            raise CredentialMissing("credentials", f'cannot load dotenv file "{env_file}"')

        values = dotenv_values(env_file)
        for variable in (USERNAME_VARIABLE, PASSWORD_VARIABLE):
            if not values.get(variable):
                self.logger.warning("Variable missing from dotenv file", variable=variable, path=str(env_file))

        self.logger.info("Loaded credentials file", path=str(env_file))
        return values

    def _ask(self, field: str, message: str, hide: bool) -> str:
        if self.prompter is None:
            raise CredentialMissing(field, "prompting is disabled")

        answer = self.prompter(message, hide)
        if not answer:
            raise CredentialMissing(field, "no value entered")
        return answer
