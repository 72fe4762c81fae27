__all__ = ["IcholException", "MalformedMatrixError", "InvalidParameterError", "NotPositiveDefiniteError"]

class IcholException(Exception):
    '''Base class for all ichol errors'''
    pass

class MalformedMatrixError(IcholException, ValueError):
    '''Raised when the input matrix is not square or its CSC arrays are inconsistent'''
    pass

class InvalidParameterError(IcholException, ValueError):
    '''Raised for a bad scaling vector, drop tolerance or fill limit'''
    pass

class NotPositiveDefiniteError(IcholException, ArithmeticError):
    '''Raised when a successful factor is required but a pivot went non-positive'''

    def __init__(self, index:int):
        # index is 1-based, same as IcholFactor.info
        self.index = index
        super().__init__(
            f"non-positive pivot or corrected diagonal at index {index}, "
            "retry with a larger alpha/beta shift or a smaller tau"
        )
