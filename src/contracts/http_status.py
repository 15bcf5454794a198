from pydantic import BaseModel, ConfigDict


class HttpStatus(BaseModel):
    """
    An HTTP status as a plain (code, description) pair.

    Any integer code can be represented, including ones a status enumeration
    does not know about.
    """

    model_config = ConfigDict(frozen=True)

    code: int
    description: str

    @classmethod
    def from_response(cls, response) -> "HttpStatus":
        """
        Build a status from an httpx response's status line.
        """
        return cls(code=response.status_code, description=response.reason_phrase)

    def __str__(self):
        return f"{self.code} {self.description}"
