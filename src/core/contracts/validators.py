"""
Contract Validators — JSON Schema контракты vault

Документы, которые vault отдаёт наружу (результат водопада комиссий и
снапшот капитального учёта), проверяются против contracts/schema/*.json
(jsonschema, draft 2020-12).

Суммы в документах — целые WAD произвольной разрядности (JSON integer,
не строки); схемы запрещают дробные значения и лишние поля.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Final, Iterator, List, Optional

import jsonschema
from jsonschema import Draft202012Validator, ValidationError
from jsonschema.exceptions import best_match

# contracts/schema относительно корня проекта
SCHEMA_DIR: Final[Path] = Path(__file__).resolve().parents[3] / "contracts" / "schema"

WATERFALL_RESULT: Final[str] = "waterfall_result"
CAPITAL_LEDGER_STATE: Final[str] = "capital_ledger_state"
CONTRACTS: Final[tuple[str, ...]] = (WATERFALL_RESULT, CAPITAL_LEDGER_STATE)


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """
    Загрузчик схем контрактов (с кэшированием).

    Каждая схема проверяется на корректность draft 2020-12, а её $id должен
    совпадать с именем файла.
    """

    def __init__(self, schema_dir: Path = SCHEMA_DIR):
        if not schema_dir.is_dir():
            raise RuntimeError(f"Schema directory not found: {schema_dir}")
        self._schema_dir = schema_dir
        self._schemas: Dict[str, Dict[str, Any]] = {}

    @property
    def schema_dir(self) -> Path:
        return self._schema_dir

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Raises:
            FileNotFoundError: Файл схемы не найден
            ValueError: Некорректная JSON Schema или $id не совпадает с именем
        """
        if schema_name in self._schemas:
            return self._schemas[schema_name]

        schema_path = self._schema_dir / f"{schema_name}.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")

        schema = json.loads(schema_path.read_text(encoding="utf-8"))
        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {schema_path.name}: {e.message}") from e

        if schema.get("$id") != schema_path.name:
            raise ValueError(
                f"Schema $id {schema.get('$id')!r} does not match file name {schema_path.name!r}"
            )

        self._schemas[schema_name] = schema
        return schema

    def load_all(self) -> Dict[str, Dict[str, Any]]:
        """Все контракты vault."""
        return {name: self.load_schema(name) for name in CONTRACTS}


@lru_cache(maxsize=None)
def _default_loader() -> SchemaLoader:
    return SchemaLoader()


# =============================================================================
# CONTRACT VALIDATORS
# =============================================================================


class ContractValidator:
    """Проверка документа против одной схемы контракта."""

    def __init__(self, schema_name: str, loader: Optional[SchemaLoader] = None):
        self.schema_name = schema_name
        self.schema = (loader or _default_loader()).load_schema(schema_name)
        self.validator = Draft202012Validator(self.schema)

    def validate(self, data: Dict[str, Any]) -> None:
        """
        Raises:
            ValidationError: Наиболее релевантное нарушение схемы
        """
        error = best_match(self.validator.iter_errors(data))
        if error is not None:
            raise error

    def is_valid(self, data: Dict[str, Any]) -> bool:
        return self.validator.is_valid(data)

    def iter_errors(self, data: Dict[str, Any]) -> Iterator[ValidationError]:
        """Все нарушения в порядке путей документа."""
        errors = sorted(
            self.validator.iter_errors(data), key=lambda e: [str(p) for p in e.absolute_path]
        )
        return iter(errors)

    def describe_errors(self, data: Dict[str, Any]) -> List[str]:
        """Нарушения в виде 'путь: сообщение' для логов и диагностики."""
        return [
            f"{'/'.join(str(p) for p in error.absolute_path) or '<root>'}: {error.message}"
            for error in self.iter_errors(data)
        ]


class WaterfallResultValidator(ContractValidator):
    """Контракт waterfall_result."""

    def __init__(self, loader: Optional[SchemaLoader] = None):
        super().__init__(WATERFALL_RESULT, loader)


class CapitalLedgerStateValidator(ContractValidator):
    """Контракт capital_ledger_state."""

    def __init__(self, loader: Optional[SchemaLoader] = None):
        super().__init__(CAPITAL_LEDGER_STATE, loader)


@lru_cache(maxsize=None)
def _waterfall_validator() -> WaterfallResultValidator:
    return WaterfallResultValidator()


@lru_cache(maxsize=None)
def _ledger_state_validator() -> CapitalLedgerStateValidator:
    return CapitalLedgerStateValidator()


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def validate_waterfall_result(data: Dict[str, Any]) -> None:
    """
    Raises:
        ValidationError: Документ не соответствует waterfall_result
    """
    _waterfall_validator().validate(data)


def validate_ledger_state(data: Dict[str, Any]) -> None:
    """
    Raises:
        ValidationError: Документ не соответствует capital_ledger_state
    """
    _ledger_state_validator().validate(data)
