__version__ = '1.0.0'
__build__ = ''
