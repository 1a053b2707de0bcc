"""
Analyzer definitions.

Loads the per-analyzer titles, offline texts and response sections from
YAML with strict validation.
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional, Tuple

import yaml

DEFAULT_DEFINITIONS_PATH = Path(__file__).with_name("analyzers.yaml")

SECTION_COUNT = 4


@dataclass(frozen=True)
class SectionDefinition:
    """One named section of the structured response table."""
    heading: str
    placeholder: str

    @property
    def marker(self) -> str:
        """Leading glyph of the heading, used to spot the row in a response.

        The emoji variation selector is dropped so that a model answering
        with the bare glyph still matches.
        """
        return self.heading.split(" ", 1)[0].replace("\ufe0f", "")


@dataclass(frozen=True)
class AnalyzerDefinition:
    """Static description of one analyzer."""
    key: str
    title: str
    icon: str
    job_name: str
    subject: str
    entity: str
    default_question: str
    offline_message: str
    sections: Tuple[SectionDefinition, ...]

    @property
    def markers(self) -> Tuple[str, ...]:
        return tuple(section.marker for section in self.sections)


_REQUIRED_KEYS = {
    'title', 'icon', 'job_name', 'subject', 'entity',
    'default_question', 'offline_message', 'sections',
}
_SECTION_KEYS = {'heading', 'placeholder'}


def load_analyzer_definitions(path: Optional[str] = None) -> Dict[str, AnalyzerDefinition]:
    """Load and validate analyzer definitions from a YAML file.

    Args:
        path: Path to YAML file, defaults to the packaged definitions

    Returns:
        Mapping of analyzer key to AnalyzerDefinition

    Raises:
        FileNotFoundError: If the file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If a definition is incomplete or has unknown keys
    """
    definitions_path = Path(path) if path else DEFAULT_DEFINITIONS_PATH
    if not definitions_path.exists():
        raise FileNotFoundError(f"Analyzer definitions not found: {definitions_path}")

    with open(definitions_path, 'r', encoding='utf-8') as f:
        try:
            raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in {definitions_path}: {e}")

    if not raw or not isinstance(raw, dict):
        raise ValueError("Analyzer definitions file is empty")

    definitions = {}
    for key, data in raw.items():
        if not isinstance(data, dict):
            raise ValueError(f"Analyzer '{key}' must be a dictionary")
        definitions[key] = _parse_definition(str(key), data)
    return definitions


def _parse_definition(key: str, data: Dict) -> AnalyzerDefinition:
    unknown_keys = set(data.keys()) - _REQUIRED_KEYS
    if unknown_keys:
        raise ValueError(f"Unknown keys in {key}: {unknown_keys}")
    missing_keys = _REQUIRED_KEYS - set(data.keys())
    if missing_keys:
        raise ValueError(f"Missing keys in {key}: {missing_keys}")

    sections_data = data['sections']
    if not isinstance(sections_data, list) or len(sections_data) != SECTION_COUNT:
        raise ValueError(f"'sections' in {key} must list exactly {SECTION_COUNT} sections")

    sections = []
    for index, section in enumerate(sections_data):
        if not isinstance(section, dict):
            raise ValueError(f"Section {index} in {key} must be a dictionary")
        if set(section.keys()) != _SECTION_KEYS:
            raise ValueError(f"Section {index} in {key} must have keys {sorted(_SECTION_KEYS)}")
        sections.append(SectionDefinition(
            heading=str(section['heading']),
            placeholder=str(section['placeholder'])
        ))

    return AnalyzerDefinition(
        key=key,
        title=str(data['title']),
        icon=str(data['icon']),
        job_name=str(data['job_name']),
        subject=str(data['subject']),
        entity=str(data['entity']),
        default_question=str(data['default_question']),
        offline_message=str(data['offline_message']),
        sections=tuple(sections)
    )


@lru_cache(maxsize=None)
def _packaged_definitions() -> Dict[str, AnalyzerDefinition]:
    return load_analyzer_definitions()


def get_definition(key: str) -> AnalyzerDefinition:
    """Get the packaged definition for an analyzer key."""
    definitions = _packaged_definitions()
    if key not in definitions:
        raise ValueError(f"Unknown analyzer: {key}")
    return definitions[key]
