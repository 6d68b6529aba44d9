"""PasswordX Vault Meta information.
   PasswordX Vault keeps credential secrets encrypted on the client side.
"""
__title__ = 'passwordx_vault'
__description__ = (
   'Client-side zero-knowledge credential vault: key derivation, '
   'field encryption and master key session handling.'
)
__version__ = '0.3.0'
__license__ = 'Apache-2.0'
