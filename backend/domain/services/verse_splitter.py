from typing import List

from domain.constants import VERSE_DELIMITER
from domain.models.song import Verse

def split_verses(text: str) -> List[str]:
    """
    歌詞テキストを空行 (連続する2つの改行) で節に分割する。
    各節は前後の空白を取り除く。空のテキストは節なしとして扱う。
    """
    if not text or not text.strip():
        return []

    # Windows 改行で保存された歌詞も同じ区切りで扱えるように正規化
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    return [part.strip() for part in normalized.split(VERSE_DELIMITER)]

def paginate_verses(text: str, page: int, limit: int) -> List[Verse]:
    """
    分割した節に1始まりの番号を振り、page/limit で切り出す。
    開始位置が節の総数以上なら空リストを返す (エラーにはしない)。
    """
    verses = split_verses(text)
    start = (page - 1) * limit
    if start >= len(verses):
        return []

    end = min(start + limit, len(verses))
    return [Verse(number=i + 1, text=verses[i]) for i in range(start, end)]
