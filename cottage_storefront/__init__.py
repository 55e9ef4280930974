"""Little Loaf Cottage storefront: cart, checkout flow and backend client"""
