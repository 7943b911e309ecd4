from medvault.api.download_requests.orm.download_request_model import DownloadRequestModel

__all__ = ["DownloadRequestModel"]
