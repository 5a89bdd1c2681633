"""YAML 시드 규칙 로드

YAML 파일(기본값은 패키지의 rules/seed_rules.yaml)에서 초기 세율 규칙을 읽어
BulkImporter로 추가합니다.

파일 형식:
    rules:
      - municipality_name: Copenhagen
        recurrence_kind: Yearly
        tax_value: 0.2
        start_date: 2024-01-01
        end_date: 2024-12-31
"""

from pathlib import Path
from typing import Union

import yaml

from .bulk_importer import BulkImporter, ImportReport
from .exceptions import ImportSourceError


def load_seed_rules(importer: BulkImporter, path: Union[str, Path]) -> ImportReport:
    """YAML 파일의 규칙을 가져오기

    Args:
        importer: 규칙을 추가할 BulkImporter
        path: YAML 파일 경로

    Returns:
        ImportReport (source_label은 "seed:<파일명>")

    Raises:
        ImportSourceError: 파일이 없거나 형식이 잘못된 경우
    """
    file_path = Path(path)
    if not file_path.exists():
        raise ImportSourceError(f"Seed rule file not found: {file_path}")

    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ImportSourceError(f"Invalid seed rule file {file_path}: {e}") from e

    # rules: [...] 형식 또는 최상위 리스트
    if isinstance(data, dict):
        data = data.get('rules')
    if not isinstance(data, list):
        raise ImportSourceError(f"Invalid seed rule file format: {file_path}")

    return importer.import_rows(data, source_label=f"seed:{file_path.name}")
