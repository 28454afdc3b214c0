'''
il2c: lowers structured, goto-free IL functions to C source
'''

__version__ = '0.1.0'
