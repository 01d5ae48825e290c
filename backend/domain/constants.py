# Field limits (songs テーブルの VARCHAR 長と揃える)
GROUP_MAX_LENGTH = 255
TITLE_MAX_LENGTH = 255
RELEASE_DATE_MAX_LENGTH = 10
LINK_MAX_LENGTH = 255

# 歌詞の節区切り (空行)
VERSE_DELIMITER = "\n\n"

# 外部 API が使えない場合のプレースホルダー
FALLBACK_RELEASE_DATE = "2000-01-01"
FALLBACK_TEXT = "Verse 1\n\nVerse 2\n\nVerse 3"
FALLBACK_LINK = "https://example.com"

# Pagination defaults
DEFAULT_SONGS_LIMIT = 10
DEFAULT_VERSES_LIMIT = 1

# DuckDB の LIMIT / OFFSET は INT64 まで
MAX_PAGING_VALUE = 2**63 - 1
