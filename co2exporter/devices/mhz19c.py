"""
MH-Z19C CO2センサー UARTクライアント

要求: [0xFF, 0x01, コマンド, 0x00 x5, チェックサム]
応答: [0xFF, コマンド, データ0..5, チェックサム]
"""
import logging
import time
from typing import Callable

import serial

from ..exceptions import ProtocolFormatError, ResponseTimeoutError, SerialIOError
from ..models.sensor_data import CO2Reading

logger = logging.getLogger(__name__)

FRAME_SIZE = 9
START_BYTE = 0xFF
SENSOR_NUMBER = 0x01

CMD_DISABLE_ABC = 0x79
CMD_READ_CO2 = 0x86


def frame_checksum(frame: bytes) -> int:
    """
    フレームのチェックサムを計算

    Args:
        frame: 9バイトのフレーム（最終バイトは無視される）

    Returns:
        チェックサム（バイト1〜7の和の2の補数）
    """
    return (0xFF - (sum(frame[1:8]) & 0xFF) + 1) & 0xFF


def build_command(opcode: int) -> bytes:
    """
    データ部が全て0のコマンドフレームを生成

    Args:
        opcode: コマンド番号

    Returns:
        9バイトのコマンドフレーム
    """
    frame = bytearray([START_BYTE, SENSOR_NUMBER, opcode, 0, 0, 0, 0, 0, 0])
    frame[8] = frame_checksum(frame)
    return bytes(frame)


DISABLE_ABC_COMMAND = build_command(CMD_DISABLE_ABC)  # FF 01 79 00 00 00 00 00 86
READ_CO2_COMMAND = build_command(CMD_READ_CO2)  # FF 01 86 00 00 00 00 00 79


class MHZ19CClient:
    """MH-Z19C CO2センサーとの通信クラス"""

    DEFAULT_BAUDRATE = 9600
    DEFAULT_TIMEOUT = 2.0
    MAX_ATTEMPTS = 20
    RETRY_DELAY = 0.001

    def __init__(
        self,
        port: serial.Serial,
        verify_checksum: bool = False,
        max_attempts: int = MAX_ATTEMPTS,
        retry_delay: float = RETRY_DELAY,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        クライアントを初期化

        Args:
            port: オープン済みのシリアルポート（このクライアントが専有する）
            verify_checksum: 応答フレームのチェックサムを検証するかどうか
            max_attempts: 応答読み取りの最大試行回数
            retry_delay: 試行間の待ち時間（秒）
            sleep: 待機関数（テスト用に差し替え可能）
        """
        self._port = port
        self.verify_checksum = verify_checksum
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self._sleep = sleep

    @classmethod
    def open(
        cls,
        device: str,
        baudrate: int = DEFAULT_BAUDRATE,
        timeout: float = DEFAULT_TIMEOUT,
        **kwargs,
    ) -> "MHZ19CClient":
        """
        シリアルポートを開いてクライアントを作成

        Args:
            device: デバイスパス（例: /dev/serial0）
            baudrate: ボーレート
            timeout: 1回の読み取りのタイムアウト（秒）

        Raises:
            SerialIOError: ポートを開けない場合
        """
        try:
            port = serial.Serial(device, baudrate=baudrate, timeout=timeout)
        except (serial.SerialException, OSError, ValueError) as e:
            raise SerialIOError(f"{device} を開けません: {e}") from e
        logger.info(f"MH-Z19Cに接続しました: {device} ({baudrate}bps)")
        return cls(port, **kwargs)

    def close(self):
        """ポートを閉じる"""
        self._port.close()

    def __enter__(self) -> "MHZ19CClient":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def disable_abc(self):
        """
        自動校正（ABC）を無効にする

        応答は読み捨てる。応答がない・不正な場合もコマンドは送信済みなので失敗としない。

        Raises:
            SerialIOError: 送受信エラー
        """
        self._write(DISABLE_ABC_COMMAND)
        try:
            self._read_response()
        except (ResponseTimeoutError, ProtocolFormatError) as e:
            logger.warning(f"自動校正無効化の応答を確認できません: {e}")

    def read_co2(self) -> int:
        """
        CO2濃度を取得

        Returns:
            CO2濃度（ppm）

        Raises:
            SerialIOError: 送受信エラー
            ResponseTimeoutError: 応答が揃わなかった場合
            ProtocolFormatError: 応答のフォーマットが不正な場合
        """
        self._write(READ_CO2_COMMAND)
        frame = self._read_response()
        if frame[1] != CMD_READ_CO2:
            raise ProtocolFormatError("unexpected format", frame)
        return CO2Reading.from_bytes(frame[2], frame[3]).co2_ppm

    def _write(self, frame: bytes):
        try:
            self._port.write(frame)
        except (serial.SerialException, OSError) as e:
            raise SerialIOError(f"write failed: {e}") from e
        logger.debug(f"送信: {frame.hex(' ')}")

    def _read(self, size: int) -> bytes:
        try:
            return self._port.read(size)
        except (serial.SerialException, OSError) as e:
            raise SerialIOError(f"read failed: {e}") from e

    def _read_response(self) -> bytes:
        """
        9バイトの応答フレームを読み取る

        先頭の0xFFより前のバイトはノイズとして捨てる。
        1回の読み取りで揃わない場合は max_attempts 回まで読み足す。
        """
        buf = bytearray()
        attempts = 0
        self._sleep(self.retry_delay)
        while True:
            attempts += 1
            chunk = self._read(FRAME_SIZE - len(buf))

            if not buf and chunk:
                start = chunk.find(START_BYTE)
                if start < 0:
                    logger.debug(f"ノイズを破棄: {chunk.hex(' ')}")
                    chunk = b""
                elif start > 0:
                    logger.debug(f"ノイズを破棄: {chunk[:start].hex(' ')}")
                    chunk = chunk[start:]

            buf += chunk
            if len(buf) >= FRAME_SIZE:
                break

            if attempts >= self.max_attempts:
                raise ResponseTimeoutError(bytes(buf), attempts)

            self._sleep(self.retry_delay)

        frame = bytes(buf[:FRAME_SIZE])
        logger.debug(f"受信: {frame.hex(' ')} ({attempts}回)")

        if frame[0] != START_BYTE:
            raise ProtocolFormatError(
                f"unexpected response start byte {frame[0]:02X}, expected 0xFF", frame
            )
        if self.verify_checksum and frame[8] != frame_checksum(frame):
            raise ProtocolFormatError(
                f"checksum mismatch, expected {frame_checksum(frame):02X}", frame
            )
        return frame

    @property
    def port(self) -> serial.Serial:
        """Underlying serial port"""
        return self._port
