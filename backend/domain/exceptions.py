class SongCatalogError(Exception):
    """カタログ操作で発生するドメイン例外の基底クラス"""


class SongValidationError(SongCatalogError):
    """入力値が不正 (空の group/title, page/limit が 1 未満 など)"""


class SongNotFoundError(SongCatalogError):
    def __init__(self, song_id: int):
        super().__init__(f"Song {song_id} not found")
        self.song_id = song_id


class LookupUnavailableError(SongCatalogError):
    """
    外部 API から補完データを取得できなかった。
    SongEnricher 内部でのみ使用し、呼び出し元には伝播させない。
    """
    def __init__(self, reason: str, message: str = ""):
        super().__init__(message or reason)
        self.reason = reason
