"""Navigator Media Meta information.
   Navigator Media fetches, verifies and decrypts end-to-end encrypted media.
"""
__title__ = 'navigator_media'
__description__ = (
   'Navigator Media fetches, verifies and decrypts '
   'end-to-end encrypted media objects.'
)
__version__ = '0.1.0'
__copyright__ = 'Copyright (c) 2023 Jesus Lara'
__author__ = 'Jesus Lara'
__author_email__ = 'jesuslarag@gmail.com'
__license__ = 'Apache-2.0'
__url__ = 'https://github.com/phenobarbital/navigator-media'
