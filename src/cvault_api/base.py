"""ConfidentialVault protocol base interface."""

from abc import ABC, abstractmethod

from .types import MetricRecord


class VaultProtocolBase(ABC):
    """ConfidentialVault protocol interface."""

    @abstractmethod
    def submit_encrypted_metric(self, cipher_hex: str) -> str:
        pass

    @abstractmethod
    def get_my_encrypted_result(self) -> str:
        pass

    @abstractmethod
    def get_my_metric(self) -> bytes:
        pass

    @abstractmethod
    def get_my_metric_record(self) -> MetricRecord:
        pass

    @abstractmethod
    def post_encrypted_result(self, result_cipher: bytes) -> str:
        pass

    @abstractmethod
    def connect(self) -> None:
        pass

    @abstractmethod
    def disconnect(self) -> None:
        pass

    @abstractmethod
    def is_connected(self) -> bool:
        pass
