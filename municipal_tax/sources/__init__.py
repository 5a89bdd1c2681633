"""가져오기 파일 소스 모듈"""

from .csv_source import read_csv_rows, open_source, SOURCE_TYPES

__all__ = ['read_csv_rows', 'open_source', 'SOURCE_TYPES']
