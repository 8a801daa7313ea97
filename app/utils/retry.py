"""
リトライ関連のユーティリティ関数
"""
import logging
import time
from typing import Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def exponential_backoff(base_delay: float) -> Callable[[int, Exception], float]:
    """試行ごとに待機時間を倍にするバックオフ（base, base*2, base*4, ...）"""
    def backoff(attempt: int, error: Exception) -> float:
        return base_delay * (2 ** (attempt - 1))
    return backoff


def linear_backoff(base_delay: float) -> Callable[[int, Exception], float]:
    """試行回数に比例して待機時間を伸ばすバックオフ（base, base*2, base*3, ...）"""
    def backoff(attempt: int, error: Exception) -> float:
        return base_delay * attempt
    return backoff


def retry_with_backoff(
    func: Callable[[], T],
    *,
    max_attempts: int,
    should_retry: Callable[[Exception], bool],
    backoff: Callable[[int, Exception], float],
    sleep: Callable[[float], None] = time.sleep,
    description: str = "処理",
) -> T:
    """
    リトライ付きで関数を呼び出す

    Args:
        func: 引数なしで呼び出す処理
        max_attempts: 最大試行回数（初回を含む）
        should_retry: 例外がリトライ対象かを判定する関数
        backoff: (試行回数, 例外) から待機秒数を返す関数
        sleep: 待機関数（テストでは差し替える）
        description: ログ出力用の処理名

    Returns:
        funcの戻り値

    Raises:
        リトライ対象外の例外、または最終試行で発生した例外
    """
    attempt = 0
    while True:
        attempt += 1
        try:
            return func()
        except Exception as e:
            if not should_retry(e):
                raise
            if attempt >= max_attempts:
                logger.error(f"{description}: 最大試行回数 {max_attempts} 回で失敗しました")
                raise
            wait_time = backoff(attempt, e)
            logger.warning(
                f"{description}に失敗しました（試行回数: {attempt}/{max_attempts}）: {str(e)}")
            logger.info(f"{wait_time}秒待機してリトライします...")
            sleep(wait_time)
