# Utils package for the Bazaar backend
