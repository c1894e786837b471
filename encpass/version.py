"""Encpass Meta information.
   Encpass stores per-script secrets encrypted on disk under a per-label key.
"""
__title__ = 'encpass'
__description__ = (
   'Encpass stores secrets encrypted on disk under a per-label '
   'AES-256 key and returns them decrypted to scripts.'
)
__version__ = '0.3.0'
__copyright__ = 'Copyright (c) 2026 Encpass Authors'
__author__ = 'Encpass Authors'
__license__ = 'MIT'
