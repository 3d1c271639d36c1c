#!/usr/bin/env python3
"""
Scan errors
"""


class ScanError(Exception):
    """
    Base scan error
    """

    exit_code = 1


class CredentialError(ScanError):
    """
    Session, identity or assume-role failure
    """

    exit_code = 3


class RoleFileError(ScanError):
    """
    Role file can't be opened or read
    """

    exit_code = 4


class ListError(ScanError):
    """
    Instance listing failure
    """

    exit_code = 5


class ImageLookupError(ScanError):
    """
    Image metadata lookup failure
    """

    exit_code = 6

    def __init__(self, image_id, message):
        super().__init__(message)
        self.image_id = image_id


class ImageNotFoundError(ImageLookupError):
    """
    No image returned for an id
    """


class TimestampParseError(ScanError):
    """
    Image creation date in an unexpected format
    """

    exit_code = 7


class RoleFormatError(ScanError):
    """
    Role line without an account field
    """

    exit_code = 8
