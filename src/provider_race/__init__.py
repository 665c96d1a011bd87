from .config import (
    load_race_config as load_race_config,
    RaceSettings as RaceSettings,
)
from .errors import (
    ConfigError as ConfigError,
    ConstructionError as ConstructionError,
    ExhaustedError as ExhaustedError,
    FatalError as FatalError,
    InvalidContentTypeError as InvalidContentTypeError,
    RaceError as RaceError,
    RetryableError as RetryableError,
    TimeoutError as TimeoutError,
    TransportError as TransportError,
    UnsupportedContentTypeError as UnsupportedContentTypeError,
)
from .normalize import ProviderResponse as ProviderResponse
from .observability import (
    EventLogger as EventLogger,
    JsonlLogger as JsonlLogger,
    LoggingEventLogger as LoggingEventLogger,
)
from .provider import (
    ApiProvider as ApiProvider,
    HttpRequest as HttpRequest,
    ResponseType as ResponseType,
)
from .race import (
    ApiRace as ApiRace,
    PrioritizedProvider as PrioritizedProvider,
    RaceConfig as RaceConfig,
)
from .signals import AbortController as AbortController, AbortSignal as AbortSignal
from .transport import RequestsTransport as RequestsTransport

__version__ = "0.1.0"
