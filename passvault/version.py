"""passvault Meta information.
   passvault keeps JSON secret records in a single AEAD-encrypted file.
"""
__title__ = 'passvault'
__description__ = (
   'Local encrypted credential vault: JSON secret records sealed '
   'in a single authenticated-encryption file.'
)
__version__ = '0.1.0'
__license__ = 'Apache-2.0'
