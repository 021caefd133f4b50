# mangalyze/mangadex_api/exceptions.py
#
#
#######################################################################################################################
#
# Functions:

class MangaDexAPIError(Exception):
    """Anything that went wrong talking to the catalog service. Windows catch this one."""
    pass

class APIConnectionError(MangaDexAPIError):
    """The catalog could not be reached: DNS, refused connection, TLS or timeout. Classified as a network failure."""
    pass

class APIResponseError(MangaDexAPIError):
    """The catalog answered with a non-2xx status. ``message`` carries the first ``errors[].detail`` when present."""
    def __init__(self, status_code: int, message: str, response_data: dict = None):
        super().__init__(f"Catalog returned {status_code}: {message}")
        self.status_code = status_code
        self.response_data = response_data or {}

class MalformedResponseError(APIResponseError):
    """A response decoded but is not a ``result == "ok"`` collection or at-home payload the client can read."""
    def __init__(self, message: str, status_code: int = 200, response_data: dict = None):
        super().__init__(status_code, message, response_data=response_data)

#
# End of mangalyze/mangadex_api/exceptions.py
########################################################################################################################
