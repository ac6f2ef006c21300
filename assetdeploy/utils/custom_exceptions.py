class BaseCustomException(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigError(BaseCustomException):
    def __init__(self, reason: str):
        super().__init__(f"Invalid configuration: {reason}")


class CompileError(BaseCustomException):
    def __init__(self, reason: str):
        super().__init__(f"Failed to compile contracts: {reason}")


class ArtifactError(BaseCustomException):
    def __init__(self, reason: str):
        super().__init__(f"Failed to resolve contract artifact: {reason}")


class EncoderError(BaseCustomException):
    def __init__(self, reason: str):
        super().__init__(f"Failed to encode constructor arguments: {reason}")


class NodeError(BaseCustomException):
    def __init__(self, reason: str):
        super().__init__(f"Failed to communicate with node: {reason}")


class DeployError(BaseCustomException):
    def __init__(self, reason: str):
        super().__init__(f"Failed to deploy contract: {reason}")


class LocalNodeError(BaseCustomException):
    def __init__(self, reason: str):
        super().__init__(f"Failed to start local node: {reason}")


class ExplorerError(BaseCustomException):
    def __init__(self, reason: str):
        super().__init__(f"Failed to communicate with Blockchain explorer: {reason}")
