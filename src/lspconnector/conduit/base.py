from abc import abstractmethod
from io import IOBase


class Conduit:
    """
    A two-way byte channel to a language server: a file-like stream the server's messages are read from,
    and a file-like stream requests are written to.
    """

    @property
    @abstractmethod
    def target(self):
        """ the underlying resource, such as the socket """
        raise NotImplementedError

    @property
    @abstractmethod
    def input(self) -> IOBase:
        """ the binary stream carrying data from the server """
        raise NotImplementedError

    @property
    @abstractmethod
    def output(self) -> IOBase:
        """ the binary stream carrying data to the server """
        raise NotImplementedError

    @property
    @abstractmethod
    def open(self) -> bool:
        """ True while input and output can be used """
        raise NotImplementedError

    @abstractmethod
    def close(self):
        """
        Closes both streams and releases the target. Closing a closed conduit has no effect.
        """
        raise NotImplementedError

