"""JSON persistence for Pydantic models.

Used for the application config file. Saves are atomic (temp file +
rename) and keep a `.bak` copy of the previous file. A corrupted file is
never overwritten automatically; loading it raises a ConfigurationError
with a recovery hint instead.
"""

import logging
import shutil
from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from cloudcontrol.exceptions import ConfigFileInvalidError, ConfigurationError, wrap_pydantic_error

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class PydanticPersistence:
    """
    Stateless helpers for loading and saving Pydantic models as JSON.

    Thread-Safety:
        All methods operate only on their arguments.
    """

    @staticmethod
    def load_json(path: Path, model_type: type[T]) -> T:
        """
        Load and validate a Pydantic model from a JSON file.

        Args:
            path: Path to the JSON file to load
            model_type: The Pydantic model class to validate against

        Returns:
            Validated model instance

        Raises:
            FileNotFoundError: If the file doesn't exist
            ConfigFileInvalidError: If the JSON syntax is invalid or the file is empty
            ConfigValidationError: If the JSON content fails validation
        """
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        try:
            json_content = path.read_text()

            if not json_content.strip():
                raise ConfigFileInvalidError(str(path), "File is empty")

            model = model_type.model_validate_json(json_content)
            logger.debug(f"Loaded {model_type.__name__} from {path}")
            return model

        except ValidationError as e:
            logger.error(f"Validation error loading {model_type.__name__} from {path}: {e}")
            raise wrap_pydantic_error(e, str(path)) from e

        except ConfigurationError:
            raise

        except OSError as e:
            logger.error(f"Could not read {path}: {e}")
            raise ConfigFileInvalidError(str(path), f"Unreadable file: {e}") from e

    @staticmethod
    def load_json_or_default(
        path: Path, model_type: type[T], default_factory: Callable[[], T] | None = None
    ) -> T:
        """
        Load a model from JSON, or return a default if the file doesn't exist.

        The default is not written to disk.

        Raises:
            ConfigFileInvalidError: If the file exists but has invalid JSON syntax
            ConfigValidationError: If the file exists but has invalid values
        """
        try:
            return PydanticPersistence.load_json(path, model_type)
        except FileNotFoundError:
            logger.info(f"File not found: {path}, using default {model_type.__name__}")
            return default_factory() if default_factory else model_type()

    @staticmethod
    def save_json(
        data: BaseModel,
        path: Path,
        indent: int = 2,
        backup: bool = True,
    ) -> None:
        """
        Save a Pydantic model to a JSON file with backup and atomic write.

        Args:
            data: The model instance to save
            path: Destination path (parent directories are created)
            indent: JSON indentation level
            backup: Copy the existing file to `<name>.bak` before overwriting

        Raises:
            OSError: If the file cannot be written
            ConfigurationError: If serialization fails
        """
        try:
            path.parent.mkdir(parents=True, exist_ok=True)

            if backup and path.exists():
                backup_path = path.with_suffix(path.suffix + ".bak")
                shutil.copy2(path, backup_path)
                logger.debug(f"Created backup: {backup_path}")

            json_content = data.model_dump_json(indent=indent)

            temp_path = path.with_suffix(path.suffix + ".tmp")
            try:
                temp_path.write_text(json_content, encoding="utf-8")
                temp_path.replace(path)
                logger.debug(f"Saved {type(data).__name__} to {path}")
            finally:
                if temp_path.exists():
                    temp_path.unlink()

        except OSError as e:
            logger.error(f"OS error saving {type(data).__name__} to {path}: {e}")
            raise

        except ValueError as e:
            logger.error(f"Could not serialize {type(data).__name__}: {e}")
            raise ConfigurationError(
                user_message=f"Failed to save configuration to {path}",
                technical_message=f"Failed to serialize {type(data).__name__}: {e}",
                recovery_hint="Check the configuration values. The previous file was kept as .bak",
            ) from e
