from .requests import FormsApiClient, FormsApiError, default_api_url

__all__ = [
    "FormsApiClient",
    "FormsApiError",
    "default_api_url",
]
