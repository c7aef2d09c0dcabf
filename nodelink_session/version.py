"""NodeLink Session Meta information.
   NodeLink Session keeps the credentials of a remote-node client
   encrypted at rest behind pluggable unlock methods.
"""
__title__ = 'nodelink_session'
__description__ = (
   'NodeLink Session keeps remote-node client credentials '
   'encrypted at rest behind pluggable unlock methods.'
)
__version__ = '0.3.0'
__copyright__ = 'Copyright (c) 2026 NodeLink Contributors'
__author__ = 'NodeLink Contributors'
__license__ = 'Apache-2.0'
