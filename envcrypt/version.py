"""envcrypt Meta information.
   envcrypt encrypts the values of dotenv-style configuration files
   with PBKDF2-derived keys and authenticated AES envelopes.
"""
__title__ = 'envcrypt'
__description__ = (
   'AES encryption of configuration values secured with '
   'PBKDF2-derived keys.'
)
__version__ = '1.0.0'
__license__ = 'Apache-2.0'
