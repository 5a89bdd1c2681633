"""CSV 파일 소스

가져오기 API의 fileSourceType별로 파일을 읽어 행(dict) 목록으로 변환합니다.
현재는 로컬 파일("Local")만 지원합니다.
"""

import csv
import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from ..core.exceptions import ImportSourceError

logger = logging.getLogger(__name__)


def read_csv_rows(path: Union[str, Path]) -> List[Dict[str, str]]:
    """CSV 파일을 행 목록으로 읽기

    첫 행은 헤더로 사용합니다. UTF-8 BOM이 있어도 처리합니다.

    Args:
        path: CSV 파일 경로

    Returns:
        헤더 -> 값 딕셔너리 리스트

    Raises:
        ImportSourceError: 파일이 없거나 읽을 수 없는 경우, 헤더가 없는 경우
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise ImportSourceError(f"Import file not found: {file_path}")

    try:
        with open(file_path, 'r', encoding='utf-8-sig', newline='') as f:
            reader = csv.DictReader(f)
            if not reader.fieldnames:
                raise ImportSourceError(f"Import file has no header row: {file_path}")
            rows = list(reader)
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        raise ImportSourceError(f"Cannot read import file {file_path}: {e}") from e

    logger.info("Read %d rows from %s", len(rows), file_path)
    return rows


def _read_local(file_path: str, base_dir: Optional[Path]) -> List[Dict[str, str]]:
    path = Path(file_path)
    if not path.is_absolute() and base_dir is not None:
        path = base_dir / path
    return read_csv_rows(path)


SOURCE_TYPES: Dict[str, Callable[[str, Optional[Path]], List[Dict[str, str]]]] = {
    'local': _read_local,
}


def open_source(
    file_source_type: str,
    file_path: str,
    base_dir: Optional[Path] = None
) -> List[Dict[str, str]]:
    """소스 유형에 맞는 리더로 파일 읽기

    Args:
        file_source_type: 소스 유형 (대소문자 무시, 예: "Local")
        file_path: 파일 경로 (상대 경로는 base_dir 기준)
        base_dir: 상대 경로 기준 디렉토리

    Raises:
        ImportSourceError: 지원하지 않는 소스 유형이거나 파일을 읽을 수 없는 경우
    """
    reader = SOURCE_TYPES.get(file_source_type.strip().lower())
    if reader is None:
        raise ImportSourceError(
            f"Unsupported file source type: {file_source_type} "
            f"(supported: {', '.join(t.title() for t in SOURCE_TYPES)})"
        )
    return reader(file_path, base_dir)
