"""Rental settlement and fiscal compliance engine"""
